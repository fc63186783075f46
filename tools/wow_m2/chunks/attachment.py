"""ATCH chunk: attachment points for weapons, shields and effects."""
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from .base import RecordListCodec

# id u32, bone u16, padding u16, position 3f, animate_attached u8
_ATTACHMENT = struct.Struct("<IHH3fB")


class M2AttachmentType(IntEnum):
    SHIELD = 0
    HAND_RIGHT = 1
    HAND_LEFT = 2
    ELBOW_RIGHT = 3
    ELBOW_LEFT = 4
    SHOULDER_RIGHT = 5
    SHOULDER_LEFT = 6
    KNEE_RIGHT = 7
    KNEE_LEFT = 8
    HIP_RIGHT = 9
    HIP_LEFT = 10
    HELMET = 11
    BACK = 12


@dataclass
class M2Attachment:
    id: int = 0
    bone: int = 0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    animate_attached: int = 1

    @classmethod
    def read(cls, reader, version):
        attachment_id, bone, _padding, x, y, z, animate = reader.read(_ATTACHMENT.format)
        return cls(attachment_id, bone, (x, y, z), animate)

    def write(self, version) -> bytes:
        return _ATTACHMENT.pack(self.id, self.bone, 0, *self.position, self.animate_attached)


class AttachmentCodec(RecordListCodec):
    tag = b"ATCH"
    record = M2Attachment
