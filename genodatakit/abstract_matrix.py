"""Common interface of variable-by-observation matrices kept in files."""

from __future__ import annotations

import math
import warnings
from abc import ABC, abstractmethod
from typing import Iterable

from .castutils import (
    cast_value,
    data_type_to_string,
    element_size,
    is_nan,
    pack_values,
    unpack_values,
)

_files_open_for_writing: set[str] = set()


class FileAlreadyOpenError(RuntimeError):
    """Raised when a file is opened for writing a second time."""


def check_open_for_writing(file_name: str) -> None:
    """Register ``file_name`` as open for writing; fail if it already is."""
    if file_name in _files_open_for_writing:
        raise FileAlreadyOpenError(f"File {file_name} is already opened.")
    _files_open_for_writing.add(file_name)


def close_for_writing(file_name: str) -> None:
    """Release the write registration of ``file_name``."""
    _files_open_for_writing.discard(file_name)


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


class AbstractMatrix(ABC):
    """A matrix whose rows are variables and columns are observations.

    Raw access works on little-endian bytes of the element type; the ``*_as``
    methods convert to and from Python numbers, with missing values as NaN.
    """

    _warning_shown = False

    @abstractmethod
    def file_name(self) -> str:
        """Return the name of the underlying file."""

    @abstractmethod
    def num_variables(self) -> int:
        """Return the number of variables."""

    @abstractmethod
    def num_observations(self) -> int:
        """Return the number of observations."""

    @abstractmethod
    def element_type(self):
        """Return the DataType of the elements."""

    def element_size(self) -> int:
        """Return the size of one element in bytes."""
        return element_size(self.element_type())

    @abstractmethod
    def read_variable(self, var_idx: int) -> bytes:
        """Return the raw bytes of one variable."""

    @abstractmethod
    def write_variable(self, var_idx: int, data: bytes) -> None:
        """Replace one variable with raw bytes."""

    @abstractmethod
    def read_element(self, var_idx: int, obs_idx: int) -> bytes:
        """Return the raw bytes of one element."""

    @abstractmethod
    def write_element(self, var_idx: int, obs_idx: int, data: bytes) -> None:
        """Replace one element with raw bytes."""

    @abstractmethod
    def add_variable(self, data: bytes, name: str) -> None:
        """Append a variable given as raw bytes."""

    def _encode(self, values: Iterable) -> bytes:
        dtype = self.element_type()
        stored = []
        for value in values:
            result = cast_value(value, dtype)
            if not _is_missing(value) and (result != value or is_nan(result, dtype)):
                self._warn_loss(value, dtype)
            stored.append(result)
        return pack_values(stored, dtype)

    def _decode(self, data: bytes) -> list[float]:
        dtype = self.element_type()
        return [math.nan if is_nan(v, dtype) else float(v) for v in unpack_values(data, dtype)]

    def _warn_loss(self, value, dtype) -> None:
        if self._warning_shown:
            return
        source = "INT" if isinstance(value, int) else "DOUBLE"
        warnings.warn(
            "Loss of precision / loss of data during conversion from "
            f"{source} to {data_type_to_string(dtype)}. "
            "Further conversion warnings omitted.",
            RuntimeWarning,
            stacklevel=3,
        )
        self._warning_shown = True

    def _checked_values(self, values: Iterable) -> list:
        items = list(values)
        if len(items) != self.num_observations():
            raise ValueError(
                f"expected {self.num_observations()} values, got {len(items)}"
            )
        return items

    def read_variable_as(self, var_idx: int) -> list[float]:
        """Return one variable as floats, missing values as NaN."""
        return self._decode(self.read_variable(var_idx))

    def write_variable_as(self, var_idx: int, values: Iterable) -> None:
        """Write one variable from numbers; NaN or None marks a missing value."""
        self.write_variable(var_idx, self._encode(self._checked_values(values)))

    def add_variable_as(self, values: Iterable, name: str) -> None:
        """Append a variable given as numbers."""
        self.add_variable(self._encode(self._checked_values(values)), name)

    def read_element_as(self, var_idx: int, obs_idx: int) -> float:
        """Return one element as a float, NaN if missing."""
        return self._decode(self.read_element(var_idx, obs_idx))[0]

    def write_element_as(self, var_idx: int, obs_idx: int, value) -> None:
        """Write one element from a number; NaN or None marks it missing."""
        self.write_element(var_idx, obs_idx, self._encode([value]))