"""TEXS chunk: texture definitions.

Record layout: texture_type u32, flags u32, filename (u32 length + UTF-8).
Identical in every version. From Legion on the file data ids live in the
separate TXID chunk, one per texture.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from .base import RecordListCodec
from ..binary import pack_string


class M2TextureType(IntEnum):
    HARDCODED = 0
    BODY = 1
    ITEM = 2
    WEAPON_BLADE = 3
    WEAPON_HANDLE = 4
    ENVIRONMENT = 5
    CHARACTER_HAIR = 6
    CHARACTER_FACIAL_HAIR = 7
    SKIN_EXTRA = 8
    UI_SKIN = 9
    TAUREN_MANE = 10
    MONSTER_1 = 11
    MONSTER_2 = 12
    MONSTER_3 = 13
    ITEM_ICON = 14


class M2TextureFlags(IntFlag):
    WRAP_X = 0x1
    WRAP_Y = 0x2


@dataclass
class M2Texture:
    texture_type: int = M2TextureType.HARDCODED
    flags: int = 0
    filename: str = ""

    @classmethod
    def read(cls, reader, version):
        texture_type, flags = reader.read("<II")
        return cls(texture_type, flags, reader.read_string())

    def write(self, version) -> bytes:
        return struct.pack("<II", self.texture_type, self.flags) + pack_string(self.filename)


class TextureCodec(RecordListCodec):
    tag = b"TEXS"
    record = M2Texture
