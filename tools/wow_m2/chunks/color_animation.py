"""COLR chunk: animated vertex colors.

Each entry holds a color track (RGB as 3f) and an alpha track whose values
are fixed16 (i16 / 32767) in every version.
"""
import struct
from dataclasses import dataclass, field

from ..binary import fixed16_to_float, float_to_fixed16
from .base import RecordListCodec
from .track import AnimationTrack, read_track, read_vec3, write_track, write_vec3


def _read_alpha(reader):
    return fixed16_to_float(reader.read_one("<h"))


def _write_alpha(value):
    return struct.pack("<h", float_to_fixed16(value, "COLR.alpha"))


@dataclass
class M2ColorAnimation:
    color: AnimationTrack = field(default_factory=AnimationTrack)
    alpha: AnimationTrack = field(default_factory=AnimationTrack)

    @classmethod
    def read(cls, reader, version):
        return cls(read_track(reader, read_vec3), read_track(reader, _read_alpha))

    def write(self, version) -> bytes:
        return write_track(self.color, write_vec3) + write_track(self.alpha, _write_alpha)


class ColorAnimationCodec(RecordListCodec):
    tag = b"COLR"
    record = M2ColorAnimation
