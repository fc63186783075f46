"""RIBB chunk: ribbon emitters.

Record layout:
- id i32, bone u32, position 3f
- texture_indices: u32 count + u16s
- material_indices: u32 count + u16s
- edges_per_second f, edge_lifetime f, gravity f, rows u16, columns u16
- priority_plane i16, padding u16 (WotLK and later only)
"""
import struct
from dataclasses import dataclass, field, replace
from typing import List, Tuple

from ..binary import pack_array
from ..version import M2Version
from .base import RecordListCodec


def has_priority_plane(version: M2Version) -> bool:
    return version >= M2Version.WOTLK


@dataclass
class M2RibbonEmitter:
    id: int = -1
    bone: int = 0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    texture_indices: List[int] = field(default_factory=list)
    material_indices: List[int] = field(default_factory=list)
    edges_per_second: float = 0.0
    edge_lifetime: float = 0.0
    gravity: float = 0.0
    rows: int = 1
    columns: int = 1
    priority_plane: int = 0

    @classmethod
    def read(cls, reader, version):
        ribbon_id, bone = reader.read("<iI")
        position = reader.read("<3f")
        textures = reader.read_array("<H", reader.read_u32())
        materials = reader.read_array("<H", reader.read_u32())
        edges_per_second, edge_lifetime, gravity, rows, columns = reader.read("<3fHH")
        priority_plane = reader.read("<hH")[0] if has_priority_plane(version) else 0
        return cls(
            ribbon_id, bone, position, textures, materials,
            edges_per_second, edge_lifetime, gravity, rows, columns, priority_plane,
        )

    def write(self, version) -> bytes:
        data = struct.pack("<iI3f", self.id, self.bone, *self.position)
        data += pack_array("H", self.texture_indices)
        data += pack_array("H", self.material_indices)
        data += struct.pack(
            "<3fHH", self.edges_per_second, self.edge_lifetime, self.gravity,
            self.rows, self.columns,
        )
        if has_priority_plane(version):
            data += struct.pack("<hH", self.priority_plane, 0)
        return data


class RibbonEmitterCodec(RecordListCodec):
    tag = b"RIBB"
    record = M2RibbonEmitter

    def transform(self, value, source, target):
        if has_priority_plane(target):
            return value
        return [replace(ribbon, priority_plane=0) for ribbon in value]
