"""TRNS chunk: texture transparency (texture weight) tracks.

Alpha key values by version:

| Version | Encoding |
|---|---|
| < Cataclysm | fixed16: i16 / 32767, range -32768/32767..1.0 |
| Cataclysm + | f32 |

Values are held as Python floats. Converting down quantises to fixed16
and raises ``FieldOverflowError`` for values that quantise outside i16; converting
up rounds to f32 precision.
"""
import struct
from dataclasses import dataclass, field, replace

from ..binary import fixed16_to_float, float_to_fixed16, to_f32
from ..version import M2Version
from .base import RecordListCodec
from .track import AnimationTrack, TrackKey, read_float, read_track, write_float, write_track


def uses_float_alpha(version: M2Version) -> bool:
    return version >= M2Version.CATACLYSM


def _read_fixed(reader):
    return fixed16_to_float(reader.read_one("<h"))


def _write_fixed(value):
    return struct.pack("<h", float_to_fixed16(value, "TRNS.alpha"))


@dataclass
class M2TransparencyAnimation:
    alpha: AnimationTrack = field(default_factory=AnimationTrack)

    @classmethod
    def read(cls, reader, version):
        read_value = read_float if uses_float_alpha(version) else _read_fixed
        return cls(read_track(reader, read_value))

    def write(self, version) -> bytes:
        write_value = write_float if uses_float_alpha(version) else _write_fixed
        return write_track(self.alpha, write_value)


class TransparencyAnimationCodec(RecordListCodec):
    tag = b"TRNS"
    record = M2TransparencyAnimation

    def transform(self, value, source, target):
        if uses_float_alpha(target):
            convert = to_f32
        else:
            def convert(alpha):
                return fixed16_to_float(float_to_fixed16(alpha, "TRNS.alpha"))

        return [
            replace(entry, alpha=replace(
                entry.alpha,
                keys=[TrackKey(key.timestamp, convert(key.value)) for key in entry.alpha.keys],
            ))
            for entry in value
        ]
