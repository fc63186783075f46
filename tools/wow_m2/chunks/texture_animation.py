"""TXAN chunk: UV transform animations.

Entry layout: animation_type u16, padding u16, then three tracks:
translation (3f), rotation (quaternion 4f), scaling (3f).
"""
import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .base import RecordListCodec
from .track import AnimationTrack, read_track, read_vec3, read_vec4, write_track, write_vec3, write_vec4


class M2TextureAnimationType(IntEnum):
    NONE = 0
    SCROLL = 1
    ROTATE = 2
    SCALE = 3
    KEYFRAME = 4


@dataclass
class M2TextureAnimation:
    animation_type: int = M2TextureAnimationType.NONE
    translation: AnimationTrack = field(default_factory=AnimationTrack)
    rotation: AnimationTrack = field(default_factory=AnimationTrack)
    scaling: AnimationTrack = field(default_factory=AnimationTrack)

    @classmethod
    def read(cls, reader, version):
        animation_type, _padding = reader.read("<HH")
        return cls(
            animation_type,
            read_track(reader, read_vec3),
            read_track(reader, read_vec4),
            read_track(reader, read_vec3),
        )

    def write(self, version) -> bytes:
        return b"".join((
            struct.pack("<HH", self.animation_type, 0),
            write_track(self.translation, write_vec3),
            write_track(self.rotation, write_vec4),
            write_track(self.scaling, write_vec3),
        ))


class TextureAnimationCodec(RecordListCodec):
    tag = b"TXAN"
    record = M2TextureAnimation
