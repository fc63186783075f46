"""PRTE chunk: particle emitters.

Record layout:
- id i32, flags u32, position 3f, bone u16, texture u16
- blend_type u8, emitter_type u8, rows u16, columns u16
- lifespan f, emission_speed f, gravity f
- multi_texture_param0 2f, multi_texture_param1 2f (Cataclysm and later only)
"""
import struct
from dataclasses import dataclass, replace
from enum import IntEnum, IntFlag
from typing import Tuple

from ..version import M2Version
from .base import RecordListCodec

_BASE = struct.Struct("<iI3fHHBBHH3f")
_MULTI_TEXTURE = struct.Struct("<4f")


class M2ParticleEmitterType(IntEnum):
    PLANE = 1
    SPHERE = 2
    SPLINE = 3
    BONE = 4


class M2ParticleFlags(IntFlag):
    LIT = 0x1
    WORLD_SPACE = 0x8
    DO_NOT_TRAIL = 0x10
    MODEL_PARTICLE = 0x1000
    MULTI_TEXTURE = 0x10000000


def has_multi_texture(version: M2Version) -> bool:
    return version >= M2Version.CATACLYSM


@dataclass
class M2ParticleEmitter:
    id: int = -1
    flags: int = 0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bone: int = 0
    texture: int = 0
    blend_type: int = 0
    emitter_type: int = M2ParticleEmitterType.PLANE
    rows: int = 1
    columns: int = 1
    lifespan: float = 0.0
    emission_speed: float = 0.0
    gravity: float = 0.0
    multi_texture_param0: Tuple[float, float] = (0.0, 0.0)
    multi_texture_param1: Tuple[float, float] = (0.0, 0.0)

    @classmethod
    def read(cls, reader, version):
        values = reader.read(_BASE.format)
        emitter = cls(
            id=values[0],
            flags=values[1],
            position=values[2:5],
            bone=values[5],
            texture=values[6],
            blend_type=values[7],
            emitter_type=values[8],
            rows=values[9],
            columns=values[10],
            lifespan=values[11],
            emission_speed=values[12],
            gravity=values[13],
        )
        if has_multi_texture(version):
            params = reader.read(_MULTI_TEXTURE.format)
            emitter.multi_texture_param0 = params[0:2]
            emitter.multi_texture_param1 = params[2:4]
        return emitter

    def write(self, version) -> bytes:
        data = _BASE.pack(
            self.id, self.flags, *self.position, self.bone, self.texture,
            self.blend_type, self.emitter_type, self.rows, self.columns,
            self.lifespan, self.emission_speed, self.gravity,
        )
        if has_multi_texture(version):
            data += _MULTI_TEXTURE.pack(*self.multi_texture_param0, *self.multi_texture_param1)
        return data


class ParticleEmitterCodec(RecordListCodec):
    """Particle emitters.

    Converting below Cataclysm resets the multi-texture parameters to
    zero, since older layouts have nowhere to store them.
    """

    tag = b"PRTE"
    record = M2ParticleEmitter

    def transform(self, value, source, target):
        if has_multi_texture(target):
            return value
        return [
            replace(emitter, multi_texture_param0=(0.0, 0.0), multi_texture_param1=(0.0, 0.0))
            for emitter in value
        ]
