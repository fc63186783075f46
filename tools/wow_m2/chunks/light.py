"""LITE chunk: lights.

Record layout: light_type u16, bone i16 (-1 = unattached), position 3f,
ambient_color 3f, ambient_intensity f, diffuse_color 3f,
diffuse_intensity f, attenuation_start f, attenuation_end f, visible u8.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from .base import RecordListCodec

_LIGHT = struct.Struct("<Hh3f3ff3ffffB")


class M2LightType(IntEnum):
    DIRECTIONAL = 0
    POINT = 1


@dataclass
class M2Light:
    light_type: int = M2LightType.POINT
    bone: int = -1
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    ambient_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    ambient_intensity: float = 0.0
    diffuse_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    diffuse_intensity: float = 0.0
    attenuation_start: float = 0.0
    attenuation_end: float = 0.0
    visible: int = 1

    @classmethod
    def read(cls, reader, version):
        v = reader.read(_LIGHT.format)
        return cls(v[0], v[1], v[2:5], v[5:8], v[8], v[9:12], v[12], v[13], v[14], v[15])

    def write(self, version) -> bytes:
        return _LIGHT.pack(
            self.light_type, self.bone, *self.position, *self.ambient_color,
            self.ambient_intensity, *self.diffuse_color, self.diffuse_intensity,
            self.attenuation_start, self.attenuation_end, self.visible,
        )


class LightCodec(RecordListCodec):
    tag = b"LITE"
    record = M2Light
