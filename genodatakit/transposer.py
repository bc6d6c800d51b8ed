"""Transposition of matrix data files without loading them whole.

The data file holds ``nvars`` variables one after another, each with
``nobss`` elements of ``data_size`` bytes. A square window of at most
``square_size`` by ``square_size`` elements is read, transposed in memory
and written to its place in the destination file.
"""

from __future__ import annotations

from typing import BinaryIO


def _pages(total: int, size: int) -> int:
    return -(-total // size)


class Transposer:
    """Transposes a variable-by-observation data file block by block."""

    def __init__(self, square_size: int = 10000) -> None:
        if square_size < 1:
            raise ValueError("square_size must be positive")
        self.square_size = square_size

    def copy_data(
        self,
        src_data_file_name: str,
        dest_data_file_name: str,
        src_nvars: int,
        src_nobss: int,
        data_size: int,
    ) -> None:
        """Write the transpose of the source data file to the destination file.

        The destination holds ``src_nobss`` variables of ``src_nvars``
        elements each; an existing destination file is overwritten.
        """
        size = self.square_size
        var_pages = _pages(src_nvars, size)
        obs_pages = _pages(src_nobss, size)

        with open(src_data_file_name, "rb") as src_stream, open(
            dest_data_file_name, "wb"
        ) as dest_stream:
            for i in range(var_pages):
                var_start = i * size
                var_length = min(size, src_nvars - var_start)
                for j in range(obs_pages):
                    obs_start = j * size
                    obs_length = min(size, src_nobss - obs_start)
                    part = self.read_part(
                        src_stream, obs_start, obs_length, var_start, var_length,
                        data_size, src_nobss,
                    )
                    transposed = self.transpose_part(part, obs_length, var_length, data_size)
                    self.write_part(
                        dest_stream, transposed, var_start, var_length, obs_start,
                        obs_length, data_size, src_nvars,
                    )

    def read_part(
        self,
        src_stream: BinaryIO,
        obs_start: int,
        obs_length: int,
        var_start: int,
        var_length: int,
        data_size: int,
        src_obs_length: int,
    ) -> bytes:
        """Read a block of ``var_length`` variables by ``obs_length`` observations.

        Variables in the source are ``src_obs_length`` elements long. The
        block is returned variable after variable.
        """
        chunks = []
        wanted = obs_length * data_size
        for i in range(var_length):
            read_pos = (var_start + i) * src_obs_length + obs_start
            src_stream.seek(read_pos * data_size)
            chunk = src_stream.read(wanted)
            if len(chunk) != wanted:
                raise ValueError(
                    f"unexpected end of data: wanted {wanted} bytes at "
                    f"{read_pos * data_size}, got {len(chunk)}"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def write_part(
        self,
        dest_stream: BinaryIO,
        data: bytes,
        obs_start: int,
        obs_length: int,
        var_start: int,
        var_length: int,
        data_size: int,
        dest_obs_length: int,
    ) -> None:
        """Write a block of ``var_length`` rows of ``obs_length`` elements.

        Variables in the destination are ``dest_obs_length`` elements long.
        """
        row_bytes = obs_length * data_size
        if len(data) != row_bytes * var_length:
            raise ValueError(
                f"expected {row_bytes * var_length} bytes, got {len(data)}"
            )
        for i in range(var_length):
            write_pos = (var_start + i) * dest_obs_length + obs_start
            dest_stream.seek(write_pos * data_size)
            dest_stream.write(data[i * row_bytes:(i + 1) * row_bytes])

    def transpose_part(
        self, data: bytes, obs_length: int, var_length: int, data_size: int
    ) -> bytes:
        """Transpose a block of ``var_length`` rows by ``obs_length`` elements."""
        if len(data) != obs_length * var_length * data_size:
            raise ValueError(
                f"expected {obs_length * var_length * data_size} bytes, got {len(data)}"
            )
        elements = [
            data[k * data_size:(k + 1) * data_size]
            for k in range(obs_length * var_length)
        ]
        return b"".join(
            elements[i * obs_length + j]
            for j in range(obs_length)
            for i in range(var_length)
        )