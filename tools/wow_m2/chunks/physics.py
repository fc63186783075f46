"""PHYS chunk: rigid bodies and joints (Mists of Pandaria and later).

Payload layout:
- shapes: u32 count + {shape_type u16, bone i16, dimensions 3f,
  friction f, restitution f, density f}
- joints: u32 count + {body_a u16, body_b u16, joint_type u16,
  padding u16, position 3f}

Joint bodies are indices into the shape list.
"""
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from ..binary import BinaryReader
from .base import ChunkCodec

_SHAPE = struct.Struct("<Hh3f3f")
_JOINT = struct.Struct("<HHHH3f")


class M2PhysicsShapeType(IntEnum):
    BOX = 0
    SPHERE = 1
    CAPSULE = 2
    POLYGON = 3


class M2PhysicsJointType(IntEnum):
    SPHERICAL = 0
    SHOULDER = 1
    WELD = 2
    REVOLUTE = 3
    PRISMATIC = 4
    DISTANCE = 5


@dataclass
class M2PhysicsShape:
    shape_type: int = M2PhysicsShapeType.BOX
    bone: int = -1
    dimensions: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    friction: float = 0.0
    restitution: float = 0.0
    density: float = 0.0


@dataclass
class M2PhysicsJoint:
    body_a: int = 0
    body_b: int = 0
    joint_type: int = M2PhysicsJointType.SPHERICAL
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class M2PhysicsData:
    shapes: List[M2PhysicsShape] = field(default_factory=list)
    joints: List[M2PhysicsJoint] = field(default_factory=list)


class PhysicsCodec(ChunkCodec):
    tag = b"PHYS"

    def decode(self, payload, version):
        reader = BinaryReader(payload, context=self.name)
        shapes = []
        for _ in range(reader.read_u32()):
            v = reader.read(_SHAPE.format)
            shapes.append(M2PhysicsShape(v[0], v[1], v[2:5], v[5], v[6], v[7]))

        joints = []
        for _ in range(reader.read_u32()):
            body_a, body_b, joint_type, _padding, x, y, z = reader.read(_JOINT.format)
            joints.append(M2PhysicsJoint(body_a, body_b, joint_type, (x, y, z)))

        reader.expect_end()
        return M2PhysicsData(shapes, joints)

    def encode(self, value, version):
        parts = [struct.pack("<I", len(value.shapes))]
        for shape in value.shapes:
            parts.append(_SHAPE.pack(
                shape.shape_type, shape.bone, *shape.dimensions,
                shape.friction, shape.restitution, shape.density,
            ))
        parts.append(struct.pack("<I", len(value.joints)))
        for joint in value.joints:
            parts.append(_JOINT.pack(joint.body_a, joint.body_b, joint.joint_type, 0, *joint.position))
        return b"".join(parts)

    def entry_count(self, value):
        return len(value.shapes)
