"""Keyframe tracks embedded in the animated chunks (TXAN, COLR, TRNS).

Track layout: interpolation u16, padding u16, key count u32, then
``count`` keys of {timestamp u32, value}. The value layout is supplied
by the owning chunk.
"""
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, List

from ..binary import BinaryReader
from ..errors import ParseError


class InterpolationType(IntEnum):
    NONE = 0
    LINEAR = 1
    BEZIER = 2
    HERMITE = 3


def parse_interpolation(value: int) -> InterpolationType:
    try:
        return InterpolationType(value)
    except ValueError:
        raise ParseError(f"Unknown interpolation type: {value}") from None


@dataclass
class TrackKey:
    timestamp: int
    value: Any


@dataclass
class AnimationTrack:
    interpolation: InterpolationType = InterpolationType.LINEAR
    keys: List[TrackKey] = field(default_factory=list)

    @property
    def key_count(self) -> int:
        return len(self.keys)


def read_track(reader: BinaryReader, read_value: Callable[[BinaryReader], Any]) -> AnimationTrack:
    interpolation, _padding, count = reader.read("<HHI")
    keys = []
    for _ in range(count):
        timestamp = reader.read_u32()
        keys.append(TrackKey(timestamp, read_value(reader)))
    return AnimationTrack(parse_interpolation(interpolation), keys)


def write_track(track: AnimationTrack, write_value: Callable[[Any], bytes]) -> bytes:
    parts = [struct.pack("<HHI", int(track.interpolation), 0, len(track.keys))]
    for key in track.keys:
        parts.append(struct.pack("<I", key.timestamp))
        parts.append(write_value(key.value))
    return b"".join(parts)


def read_vec3(reader: BinaryReader):
    return reader.read("<3f")


def write_vec3(value) -> bytes:
    return struct.pack("<3f", *value)


def read_vec4(reader: BinaryReader):
    return reader.read("<4f")


def write_vec4(value) -> bytes:
    return struct.pack("<4f", *value)


def read_float(reader: BinaryReader) -> float:
    return reader.read_one("<f")


def write_float(value: float) -> bytes:
    return struct.pack("<f", value)
