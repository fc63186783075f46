"""CAMS chunk: cameras.

Record layout: camera_type i32, fov f, far_clip f, near_clip f,
position 3f, target 3f. Unchanged across versions.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from .base import RecordListCodec

_CAMERA = struct.Struct("<i3f3f3f")


class M2CameraType(IntEnum):
    FLYBY = -1
    PORTRAIT = 0
    CHARACTER_INFO = 1


@dataclass
class M2Camera:
    camera_type: int = M2CameraType.PORTRAIT
    fov: float = 0.0
    far_clip: float = 0.0
    near_clip: float = 0.0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    target: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @classmethod
    def read(cls, reader, version):
        values = reader.read(_CAMERA.format)
        return cls(values[0], values[1], values[2], values[3], values[4:7], values[7:10])

    def write(self, version) -> bytes:
        return _CAMERA.pack(
            self.camera_type, self.fov, self.far_clip, self.near_clip,
            *self.position, *self.target,
        )


class CameraCodec(RecordListCodec):
    tag = b"CAMS"
    record = M2Camera
