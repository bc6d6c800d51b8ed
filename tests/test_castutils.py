import math

import pytest

from genodatakit.castutils import (
    DataType,
    UnknownDataTypeError,
    cast_value,
    data_type_from_string,
    data_type_to_string,
    element_size,
    format_value,
    is_nan,
    nan_value,
    pack_values,
    parse_value,
    unpack_values,
)

INTEGER_TYPES = [
    DataType.UNSIGNED_SHORT_INT,
    DataType.SHORT_INT,
    DataType.UNSIGNED_INT,
    DataType.INT,
    DataType.SIGNED_CHAR,
    DataType.UNSIGNED_CHAR,
]


@pytest.mark.parametrize("dtype", list(DataType))
def test_name_round_trip(dtype):
    assert data_type_from_string(data_type_to_string(dtype)) == dtype


def test_char_name():
    assert data_type_from_string("CHAR") == DataType.SIGNED_CHAR
    assert data_type_to_string(7) == "CHAR"


@pytest.mark.parametrize("name", ["BOOL", "", "int"])
def test_unknown_name(name):
    with pytest.raises(UnknownDataTypeError):
        data_type_from_string(name)


@pytest.mark.parametrize("code", [0, 9, "x"])
def test_unknown_code(code):
    with pytest.raises(UnknownDataTypeError):
        data_type_to_string(code)
    with pytest.raises(UnknownDataTypeError):
        nan_value(code)


@pytest.mark.parametrize("dtype", list(DataType))
def test_element_size_matches_packing(dtype):
    assert len(pack_values([0], dtype)) == element_size(dtype)


def test_integer_nan_markers():
    assert nan_value(DataType.SHORT_INT) == 32767
    assert nan_value(DataType.UNSIGNED_SHORT_INT) == 65535
    assert nan_value(DataType.INT) == 2147483647
    assert nan_value(DataType.UNSIGNED_INT) == 4294967295
    assert nan_value(DataType.SIGNED_CHAR) == 127
    assert nan_value(DataType.UNSIGNED_CHAR) == 255


@pytest.mark.parametrize("dtype", list(DataType))
def test_nan_marker_detected(dtype):
    assert is_nan(nan_value(dtype), dtype)
    assert not is_nan(0, dtype)


def test_parse_plain_and_leading_number():
    assert parse_value("42", DataType.INT, "NA") == 42
    assert parse_value("  17abc", DataType.SHORT_INT, "NA") == 17
    assert parse_value("2.5", DataType.FLOAT, "NA") == 2.5


def test_parse_nan_string_and_garbage():
    assert parse_value("NA", DataType.INT, "NA") == nan_value(DataType.INT)
    assert math.isnan(parse_value("xyz", DataType.DOUBLE, "NA"))
    assert parse_value("abc", DataType.UNSIGNED_CHAR, "NA") == nan_value(DataType.UNSIGNED_CHAR)


def test_parse_negative_into_unsigned_wraps_to_marker():
    assert parse_value("-1", DataType.UNSIGNED_SHORT_INT, "NA") == nan_value(
        DataType.UNSIGNED_SHORT_INT
    )


def test_parse_char_accepts_hex():
    assert parse_value("0x10", DataType.SIGNED_CHAR, "NA") == 16


@pytest.mark.parametrize("dtype", INTEGER_TYPES)
@pytest.mark.parametrize("value", [0, 1, 100])
def test_format_parse_round_trip(dtype, value):
    text = format_value(value, dtype, "NA")
    assert parse_value(text, dtype, "NA") == value


def test_format_values():
    assert format_value(2.5, DataType.DOUBLE, "NA") == "2.500000"
    assert format_value(-3, DataType.SHORT_INT, "x") == "-3"
    assert format_value(nan_value(DataType.INT), DataType.INT, "NA") == "NA"
    assert format_value(math.nan, DataType.FLOAT, "missing") == "missing"


def test_cast_truncates_towards_zero():
    assert cast_value(3.7, DataType.INT) == 3


def test_cast_missing_values():
    assert cast_value(math.nan, DataType.INT) == nan_value(DataType.INT)
    assert cast_value(None, DataType.SHORT_INT) == nan_value(DataType.SHORT_INT)
    assert math.isnan(cast_value(math.nan, DataType.DOUBLE))


def test_cast_wraps_unsigned():
    assert cast_value(-1, DataType.UNSIGNED_CHAR) == nan_value(DataType.UNSIGNED_CHAR)


def test_cast_infinity_to_integer_is_missing():
    assert cast_value(math.inf, DataType.INT) == nan_value(DataType.INT)


def test_cast_float_rounds_to_single_precision():
    result = cast_value(0.1, DataType.FLOAT)
    assert result != 0.1
    assert abs(result - 0.1) < 1e-7
    assert unpack_values(pack_values([result], DataType.FLOAT), DataType.FLOAT)[0] == result


@pytest.mark.parametrize("dtype", list(DataType))
def test_pack_unpack_round_trip(dtype):
    values = [0, 1, 2, nan_value(dtype) if dtype in INTEGER_TYPES else 5.0]
    assert unpack_values(pack_values(values, dtype), dtype) == values


def test_unpack_rejects_partial_element():
    with pytest.raises(ValueError):
        unpack_values(b"\x00\x00\x00", DataType.INT)


def test_pack_rejects_out_of_range():
    with pytest.raises(ValueError):
        pack_values([70000], DataType.UNSIGNED_SHORT_INT)