"""VRTX chunk: the model's vertex buffer.

Record layout (48 bytes): position 3f, bone_weights 4B, bone_indices 4B,
normal 3f, tex_coords 2f, tex_coords_2 2f.
"""
import struct
from dataclasses import dataclass
from typing import List, Tuple

from .base import RecordListCodec

_VERTEX = struct.Struct("<3f4B4B3f2f2f")


@dataclass
class M2Vertex:
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bone_weights: Tuple[int, int, int, int] = (255, 0, 0, 0)
    bone_indices: Tuple[int, int, int, int] = (0, 0, 0, 0)
    normal: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    tex_coords: Tuple[float, float] = (0.0, 0.0)
    tex_coords_2: Tuple[float, float] = (0.0, 0.0)

    def influences(self) -> List[Tuple[int, int]]:
        """(bone index, weight) pairs with a non-zero weight."""
        return [
            (index, weight)
            for index, weight in zip(self.bone_indices, self.bone_weights)
            if weight > 0
        ]

    @classmethod
    def read(cls, reader, version):
        v = reader.read(_VERTEX.format)
        return cls(v[0:3], v[3:7], v[7:11], v[11:14], v[14:16], v[16:18])

    def write(self, version) -> bytes:
        return _VERTEX.pack(
            *self.position, *self.bone_weights, *self.bone_indices,
            *self.normal, *self.tex_coords, *self.tex_coords_2,
        )


class VertexCodec(RecordListCodec):
    tag = b"VRTX"
    record = M2Vertex
