"""MATS chunk: render flags and blend modes.

Record layout: flags u16, blend_mode u16. Blend modes 0..6 exist in every
version; mode 7 (BLEND_ADD) only from WotLK on.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from ..binary import check_range
from ..version import M2Version
from .base import RecordListCodec


class M2BlendMode(IntEnum):
    OPAQUE = 0
    ALPHA_KEY = 1
    ALPHA = 2
    NO_ALPHA_ADD = 3
    ADD = 4
    MOD = 5
    MOD2X = 6
    BLEND_ADD = 7


class M2RenderFlags(IntFlag):
    UNLIT = 0x01
    UNFOGGED = 0x02
    TWO_SIDED = 0x04
    BILLBOARD = 0x08
    NO_ZBUFFER = 0x10


def max_blend_mode(version: M2Version) -> int:
    return M2BlendMode.BLEND_ADD if version >= M2Version.WOTLK else M2BlendMode.MOD2X


@dataclass
class M2Material:
    flags: int = 0
    blend_mode: int = M2BlendMode.OPAQUE

    @classmethod
    def read(cls, reader, version):
        return cls(*reader.read("<HH"))

    def write(self, version) -> bytes:
        return struct.pack("<HH", self.flags, self.blend_mode)


class MaterialCodec(RecordListCodec):
    tag = b"MATS"
    record = M2Material

    def transform(self, value, source, target):
        limit = max_blend_mode(target)
        for index, material in enumerate(value):
            check_range(f"MATS[{index}].blend_mode", material.blend_mode, 0, limit)
        return value
