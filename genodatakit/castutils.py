"""Element types of matrix files and conversions between them and Python values."""

from __future__ import annotations

import math
import re
import struct
from enum import IntEnum
from typing import Iterable, Sequence


class DataType(IntEnum):
    """Element types; the numeric codes are those stored in file headers."""

    UNSIGNED_SHORT_INT = 1
    SHORT_INT = 2
    UNSIGNED_INT = 3
    INT = 4
    FLOAT = 5
    DOUBLE = 6
    SIGNED_CHAR = 7
    UNSIGNED_CHAR = 8


class UnknownDataTypeError(ValueError):
    """Raised for a type code or type name that is not one of DataType."""


_TYPE_NAMES = {
    DataType.UNSIGNED_SHORT_INT: "UNSIGNED_SHORT_INT",
    DataType.SHORT_INT: "SHORT_INT",
    DataType.UNSIGNED_INT: "UNSIGNED_INT",
    DataType.INT: "INT",
    DataType.FLOAT: "FLOAT",
    DataType.DOUBLE: "DOUBLE",
    DataType.SIGNED_CHAR: "CHAR",
    DataType.UNSIGNED_CHAR: "UNSIGNED_CHAR",
}
_TYPES_BY_NAME = {name: dtype for dtype, name in _TYPE_NAMES.items()}

# struct code, width in bits, signedness
_INTEGER_SPECS = {
    DataType.UNSIGNED_SHORT_INT: ("H", 16, False),
    DataType.SHORT_INT: ("h", 16, True),
    DataType.UNSIGNED_INT: ("I", 32, False),
    DataType.INT: ("i", 32, True),
    DataType.SIGNED_CHAR: ("b", 8, True),
    DataType.UNSIGNED_CHAR: ("B", 8, False),
}
_FLOAT_CODES = {DataType.FLOAT: "f", DataType.DOUBLE: "d"}

_DECIMAL_RE = re.compile(r"\s*([+-]?\d+)")
_C_INTEGER_RE = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _coerce(dtype) -> DataType:
    try:
        return DataType(int(dtype))
    except (TypeError, ValueError):
        raise UnknownDataTypeError(f"file contains data of unknown type {dtype}") from None


def _is_float_type(dtype: DataType) -> bool:
    return dtype in _FLOAT_CODES


def _struct_code(dtype: DataType) -> str:
    if dtype in _FLOAT_CODES:
        return _FLOAT_CODES[dtype]
    return _INTEGER_SPECS[dtype][0]


def _wrap(value: int, dtype: DataType) -> int:
    _, bits, signed = _INTEGER_SPECS[dtype]
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def data_type_from_string(name: str) -> DataType:
    """Return the type named by ``name`` ("INT", "CHAR", ...)."""
    try:
        return _TYPES_BY_NAME[name]
    except KeyError:
        raise UnknownDataTypeError(f"unknown data type name {name!r}") from None


def data_type_to_string(dtype) -> str:
    """Return the name of a type code."""
    return _TYPE_NAMES[_coerce(dtype)]


def element_size(dtype) -> int:
    """Return the number of bytes one element of ``dtype`` occupies."""
    return struct.calcsize("<" + _struct_code(_coerce(dtype)))


def nan_value(dtype):
    """Return the value that marks a missing element of ``dtype``."""
    dtype = _coerce(dtype)
    if _is_float_type(dtype):
        return math.nan
    _, bits, signed = _INTEGER_SPECS[dtype]
    return (1 << (bits - 1)) - 1 if signed else (1 << bits) - 1


def is_nan(value, dtype) -> bool:
    """Tell whether ``value`` is the missing-value marker of ``dtype``."""
    dtype = _coerce(dtype)
    if _is_float_type(dtype):
        return math.isnan(value)
    return value == nan_value(dtype)


def parse_value(text: str, dtype, nan_string: str):
    """Parse the leading number of ``text`` as ``dtype``.

    Text equal to ``nan_string``, or text with no leading number, gives the
    missing-value marker. Character types accept decimal, octal (leading 0)
    and hexadecimal (leading 0x) forms.
    """
    dtype = _coerce(dtype)
    if text == nan_string:
        return nan_value(dtype)

    if _is_float_type(dtype):
        match = _FLOAT_RE.match(text)
        if not match:
            return nan_value(dtype)
        value = float(match.group(1))
        return _to_float32(value) if dtype is DataType.FLOAT else value

    if dtype in (DataType.SIGNED_CHAR, DataType.UNSIGNED_CHAR):
        match = _C_INTEGER_RE.match(text)
        if not match:
            return nan_value(dtype)
        sign, digits = match.groups()
        if digits[:2].lower() == "0x":
            value = int(digits[2:], 16)
        elif digits.startswith("0"):
            value = int(digits, 8)
        else:
            value = int(digits)
        if sign == "-":
            value = -value
    else:
        match = _DECIMAL_RE.match(text)
        if not match:
            return nan_value(dtype)
        value = int(match.group(1))
    return _wrap(value, dtype)


def format_value(value, dtype, nan_string: str) -> str:
    """Render a stored value as text; missing values become ``nan_string``."""
    dtype = _coerce(dtype)
    if is_nan(value, dtype):
        return nan_string
    if _is_float_type(dtype):
        return "%f" % value
    return str(int(value))


def cast_value(value, dtype):
    """Convert a Python number to the value stored for ``dtype``.

    ``None`` and float NaN become the missing-value marker. Integer targets
    truncate towards zero and wrap to the type's width; FLOAT rounds to
    single precision. Infinities cannot be held by integer types and become
    the missing-value marker.
    """
    dtype = _coerce(dtype)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return nan_value(dtype)
    if _is_float_type(dtype):
        result = float(value)
        return _to_float32(result) if dtype is DataType.FLOAT else result
    if isinstance(value, float) and not math.isfinite(value):
        return nan_value(dtype)
    return _wrap(int(value), dtype)


def pack_values(values: Iterable, dtype) -> bytes:
    """Pack stored values of ``dtype`` into little-endian bytes."""
    dtype = _coerce(dtype)
    items = list(values)
    try:
        return struct.pack(f"<{len(items)}{_struct_code(dtype)}", *items)
    except struct.error as exc:
        raise ValueError(f"cannot pack values as {_TYPE_NAMES[dtype]}: {exc}") from exc


def unpack_values(data: bytes, dtype) -> list:
    """Unpack little-endian bytes into a list of stored values of ``dtype``."""
    dtype = _coerce(dtype)
    size = element_size(dtype)
    if len(data) % size:
        raise ValueError(
            f"{len(data)} bytes is not a whole number of {_TYPE_NAMES[dtype]} elements"
        )
    return list(struct.unpack(f"<{len(data) // size}{_struct_code(dtype)}", data))


def _stored_to_float(values: Sequence, dtype: DataType) -> list[float]:
    return [math.nan if is_nan(v, dtype) else float(v) for v in values]