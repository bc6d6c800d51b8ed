"""File handles shared between several users of the same file.

Opening the same file twice in the same mode reuses one underlying stream.
Each handle keeps its own position. The stream is closed when its last
handle is closed.
"""

from __future__ import annotations

from typing import BinaryIO, ClassVar


class SharedFile:
    """A binary stream with a count of the handles that use it."""

    def __init__(self) -> None:
        self._use_count = 0
        self._stream: BinaryIO | None = None
        self.file_name = ""
        self.read_only = False

    def open(self, file_name: str, read_only: bool) -> bool:
        """Open the file, or count one more user if it is already open.

        Returns False when the file cannot be opened. A writable open needs
        the file to exist already.
        """
        self.file_name = file_name
        if self._use_count > 0:
            self._use_count += 1
            return True
        try:
            self._stream = open(file_name, "rb" if read_only else "r+b")
        except OSError:
            return False
        self.read_only = read_only
        self._use_count = 1
        return True

    def close(self) -> None:
        """Drop one user; the stream is closed when no user is left."""
        if self._use_count > 1:
            self._use_count -= 1
        elif self._use_count == 1:
            self._use_count = 0
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def _require_stream(self) -> BinaryIO:
        if self._stream is None:
            raise ValueError(f"file {self.file_name!r} is not open")
        return self._stream

    def read_at(self, pos: int, length: int) -> bytes:
        """Read up to ``length`` bytes starting at ``pos``."""
        stream = self._require_stream()
        stream.seek(pos)
        return stream.read(length)

    def write_at(self, pos: int, data: bytes) -> None:
        """Write ``data`` starting at ``pos``."""
        stream = self._require_stream()
        stream.seek(pos)
        stream.write(data)

    def flush(self) -> None:
        """Flush buffered writes to the file."""
        self._require_stream().flush()

    def use_count(self) -> int:
        """Return the number of users of the stream."""
        return self._use_count


class ReusableFileHandle:
    """A positioned handle onto a shared stream."""

    _open_handles: ClassVar[dict[str, SharedFile]] = {}

    def __init__(self, shared: SharedFile, file_name: str, read_only: bool) -> None:
        self._shared = shared
        self.file_name = file_name
        self.read_only = read_only
        self._pos = 0
        self._closed = False

    @staticmethod
    def _key(file_name: str, read_only: bool) -> str:
        return ("R" if read_only else "*") + file_name

    @classmethod
    def get_handle(cls, file_name: str, read_only: bool = False) -> "ReusableFileHandle":
        """Return a handle onto ``file_name``, reusing an open stream if any.

        Raises OSError when the file cannot be opened.
        """
        key = cls._key(file_name, read_only)
        shared = cls._open_handles.get(key)
        if shared is not None:
            shared.open(file_name, read_only)
        else:
            shared = SharedFile()
            if not shared.open(file_name, read_only):
                mode = "read" if read_only else "write & read"
                raise OSError(f"Opening file {file_name} for {mode} failed")
            cls._open_handles[key] = shared
        return cls(shared, file_name, read_only)

    @classmethod
    def open_handle_count(cls) -> int:
        """Return the number of distinct shared streams currently open."""
        return len(cls._open_handles)

    def seek(self, pos: int) -> None:
        """Set this handle's position."""
        self._pos = pos

    def read(self, length: int) -> bytes:
        """Read ``length`` bytes at the current position and advance it."""
        data = self._shared.read_at(self._pos, length)
        self._pos += length
        return data

    def write(self, data: bytes) -> None:
        """Write ``data`` at the current position and advance it."""
        self._shared.write_at(self._pos, data)
        self._pos += len(data)

    def flush(self) -> None:
        """Flush the shared stream."""
        self._shared.flush()

    def close(self) -> None:
        """Release this handle; closing twice has no further effect."""
        if self._closed:
            return
        self._closed = True
        key = self._key(self.file_name, self.read_only)
        shared = self._open_handles.get(key)
        if shared is None:
            return
        shared.close()
        if shared.use_count() == 0:
            del self._open_handles[key]

    def __enter__(self) -> "ReusableFileHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()