"""BONE chunk: the skeleton.

Record layout:
- key_bone_id i32, flags u32, parent_bone i16 (-1 = root), submesh_id u16
- bone_name_crc u32 (TBC and later only)
- pivot 3f
"""
import struct
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import List, Tuple

from ..version import M2Version
from .base import RecordListCodec


class M2BoneFlags(IntFlag):
    IGNORE_PARENT_TRANSLATE = 0x1
    IGNORE_PARENT_SCALE = 0x2
    IGNORE_PARENT_ROTATION = 0x4
    SPHERICAL_BILLBOARD = 0x8
    TRANSFORMED = 0x200


@dataclass
class M2Bone:
    key_bone_id: int = -1
    flags: int = 0
    parent_bone: int = -1
    submesh_id: int = 0
    bone_name_crc: int = 0
    pivot: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def is_root(self) -> bool:
        return self.parent_bone == -1

    @staticmethod
    def has_name_crc(version: M2Version) -> bool:
        return version >= M2Version.TBC

    @classmethod
    def read(cls, reader, version):
        key_bone_id, flags, parent_bone, submesh_id = reader.read("<iIhH")
        crc = reader.read_u32() if cls.has_name_crc(version) else 0
        return cls(key_bone_id, flags, parent_bone, submesh_id, crc, reader.read("<3f"))

    def write(self, version) -> bytes:
        data = struct.pack("<iIhH", self.key_bone_id, self.flags, self.parent_bone, self.submesh_id)
        if self.has_name_crc(version):
            data += struct.pack("<I", self.bone_name_crc)
        return data + struct.pack("<3f", *self.pivot)


class BoneCodec(RecordListCodec):
    tag = b"BONE"
    record = M2Bone

    def transform(self, value: List[M2Bone], source, target):
        # Classic has no name CRC; going down loses it, going up starts at 0.
        if not M2Bone.has_name_crc(target):
            return [replace(bone, bone_name_crc=0) for bone in value]
        return value
