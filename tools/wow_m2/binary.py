"""Little-endian read/write helpers shared by every codec."""
import struct
from typing import Tuple

from .errors import FieldOverflowError, ParseError, TruncatedError

FIXED16_SCALE = 32767.0
FIXED16_MIN = -32768
FIXED16_MAX = 32767


class BinaryReader:
    """Cursor over a byte buffer.

    Every read is bounds-checked and raises ``TruncatedError`` instead of
    returning short data.
    """

    def __init__(self, data: bytes, offset: int = 0, context: str = ""):
        self.data = data
        self.offset = offset
        self.context = context

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def _require(self, size: int):
        if size > self.remaining:
            raise TruncatedError(size, max(self.remaining, 0), self.context)

    def read(self, fmt: str) -> Tuple:
        """Unpack a little-endian struct format at the cursor."""
        if not fmt.startswith("<"):
            fmt = "<" + fmt
        size = struct.calcsize(fmt)
        self._require(size)
        values = struct.unpack_from(fmt, self.data, self.offset)
        self.offset += size
        return values

    def read_one(self, fmt: str):
        return self.read(fmt)[0]

    def read_u32(self) -> int:
        return self.read_one("<I")

    def read_bytes(self, size: int) -> bytes:
        self._require(size)
        chunk = bytes(self.data[self.offset:self.offset + size])
        self.offset += size
        return chunk

    def read_string(self) -> str:
        """Read a u32 length-prefixed UTF-8 string."""
        raw = self.read_bytes(self.read_u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid UTF-8 string: {e}") from None

    def read_array(self, fmt: str, count: int) -> list:
        """Read ``count`` values of a single-field struct format."""
        return [self.read_one(fmt) for _ in range(count)]

    def expect_end(self):
        """Raise if unread bytes are left behind."""
        if self.remaining:
            where = f" in {self.context}" if self.context else ""
            raise ParseError(f"{self.remaining} unexpected trailing bytes{where}")


def pack_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


def pack_array(fmt: str, values) -> bytes:
    """Pack a u32 count followed by ``values`` in a single-field format."""
    values = list(values)
    return struct.pack(f"<I{len(values)}{fmt.lstrip('<')}", len(values), *values)


def fixed16_to_float(value: int) -> float:
    return value / FIXED16_SCALE


def float_to_fixed16(value: float, field: str) -> int:
    """Quantise ``value`` to a signed 16-bit fixed-point fraction.

    The quantised step must fit an i16, so -32768 / 32767 (just below
    -1.0) is still representable.
    """
    quantised = int(round(value * FIXED16_SCALE))
    if not FIXED16_MIN <= quantised <= FIXED16_MAX:
        raise FieldOverflowError(field, value, f"fixed16 steps {FIXED16_MIN}..{FIXED16_MAX}")
    return quantised


def to_f32(value: float) -> float:
    """Round a Python float to the nearest 32-bit float."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def check_range(field: str, value: int, low: int, high: int) -> int:
    if not low <= value <= high:
        raise FieldOverflowError(field, value, f"allowed {low}..{high}")
    return value
