"""EVTS chunk: animation events (footsteps, sounds, spell hooks)."""
import struct
from dataclasses import dataclass
from typing import Tuple

from .base import RecordListCodec

# identifier 4s, data u32, bone u16, padding u16, position 3f
_EVENT = struct.Struct("<4sIHH3f")


@dataclass
class M2Event:
    identifier: bytes = b"\0\0\0\0"
    data: int = 0
    bone: int = 0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def name(self) -> str:
        return self.identifier.decode("ascii", errors="replace")

    @classmethod
    def read(cls, reader, version):
        identifier, data, bone, _padding, x, y, z = reader.read(_EVENT.format)
        return cls(identifier, data, bone, (x, y, z))

    def write(self, version) -> bytes:
        return _EVENT.pack(self.identifier, self.data, self.bone, 0, *self.position)


class EventCodec(RecordListCodec):
    tag = b"EVTS"
    record = M2Event
