"""
Value normalization for column comparison.

Turns one raw column value into the canonical string both sides are
compared by. Comparison is exact string equality, so floats are rendered
with a fixed ``%e`` precision rather than compared with a tolerance.
"""

import struct
from typing import Any

from .errors import ScanError, UnsupportedTypeError
from .types import ScanType

NULL = "null"

INT_RANGES = {
    ScanType.INT8: (-(2 ** 7), 2 ** 7 - 1),
    ScanType.INT32: (-(2 ** 31), 2 ** 31 - 1),
    ScanType.UINT32: (0, 2 ** 32 - 1),
    ScanType.INT64: (-(2 ** 63), 2 ** 63 - 1),
    ScanType.UINT64: (0, 2 ** 64 - 1),
    ScanType.NULL_INT32: (-(2 ** 31), 2 ** 31 - 1),
    ScanType.NULL_INT64: (-(2 ** 63), 2 ** 63 - 1),
    ScanType.NULL_UINT64: (0, 2 ** 64 - 1),
}


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _integer(value: Any, scan_type: ScanType) -> str:
    if isinstance(value, (bytes, bytearray, memoryview, str)):
        # Some drivers hand integers back as text
        try:
            value = int(_text(value).strip())
        except ValueError as e:
            raise ScanError(f"converting {value!r} to {scan_type.value}: {e}") from e
    elif isinstance(value, bool):
        value = int(value)
    elif not isinstance(value, int):
        try:
            as_int = int(value)
        except (TypeError, ValueError) as e:
            raise ScanError(
                f"converting {type(value).__name__} {value!r} to {scan_type.value}: {e}"
            ) from e
        if as_int != value:
            raise ScanError(f"converting {value!r} to {scan_type.value}: not an integer")
        value = as_int

    low, high = INT_RANGES[scan_type]
    if not low <= value <= high:
        raise ScanError(f"converting {value} to {scan_type.value}: value out of range")
    return "%d" % value


def _float(value: Any, scan_type: ScanType) -> str:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ScanError(
            f"converting {type(value).__name__} {value!r} to {scan_type.value}: {e}"
        ) from e
    if scan_type is ScanType.FLOAT32:
        # Round to single precision so both sides compare at the column's width
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as e:
            raise ScanError(f"converting {value!r} to float32: {e}") from e
    return "%e" % value


def normalize(value: Any, scan_type: ScanType) -> str:
    """
    Render a raw column value as its canonical comparison string.

    Args:
        value: Value as returned by the DB-API cursor
        scan_type: Scan type of the column

    Returns:
        ``"null"`` for NULL in nullable kinds, the text of raw/time
        columns, the decimal form of integers, ``%e`` for floats

    Raises:
        UnsupportedTypeError: scan_type is not a recognized column kind
        ScanError: the value does not fit the kind (NULL in a
            non-nullable column, integer out of range, non-numeric value)
    """
    if not isinstance(scan_type, ScanType) or scan_type is ScanType.UNSUPPORTED:
        raise UnsupportedTypeError(getattr(scan_type, "value", str(scan_type)))

    if value is None:
        if scan_type.nullable:
            return NULL
        raise ScanError(f"converting NULL to {scan_type.value} is unsupported")

    if scan_type in (ScanType.RAW_BYTES, ScanType.NULL_TIME):
        return _text(value)
    if scan_type in INT_RANGES:
        return _integer(value, scan_type)
    if scan_type in (ScanType.FLOAT32, ScanType.FLOAT64):
        return _float(value, scan_type)

    raise UnsupportedTypeError(scan_type.value)
