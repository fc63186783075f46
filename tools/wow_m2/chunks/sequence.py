"""SEQS chunk: animation sequences.

Record layout by version:

| Field | < WotLK | WotLK .. WoD | Legion + |
|---|---|---|---|
| id, variation_index | 2×u16 | 2×u16 | 2×u16 |
| timing | start u32, end u32 | duration u32 | duration u32 |
| movement_speed, flags, frequency, padding, replay_min, replay_max | f, u32, i16, u16, u32, u32 | same | same |
| blending | blend_time u32 | blend_time u32 | blend_time_in u16, blend_time_out u16 |
| bounds_min, bounds_max, bounds_radius | 3f, 3f, f | same | same |
| variation_next, alias_next | i16, u16 | same | same |

Before WotLK every sequence is a slice of one global timeline, so the
in-memory record keeps ``start_timestamp`` next to ``duration``. Later
versions give each sequence its own timeline and ``start_timestamp``
is always 0.
"""
import struct
from dataclasses import dataclass, replace
from typing import List, Tuple

from ..binary import check_range
from ..errors import ParseError
from ..version import M2Version
from .base import RecordListCodec

U16_MAX = 0xFFFF


def uses_global_timeline(version: M2Version) -> bool:
    return version < M2Version.WOTLK


def uses_split_blend_time(version: M2Version) -> bool:
    return version >= M2Version.LEGION


@dataclass
class M2Sequence:
    id: int = 0
    variation_index: int = 0
    start_timestamp: int = 0
    duration: int = 0
    movement_speed: float = 0.0
    flags: int = 0
    frequency: int = 0
    padding: int = 0
    replay_min: int = 0
    replay_max: int = 0
    blend_time_in: int = 0
    blend_time_out: int = 0
    bounds_min: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounds_max: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounds_radius: float = 0.0
    variation_next: int = -1
    alias_next: int = 0

    @property
    def end_timestamp(self) -> int:
        return self.start_timestamp + self.duration

    @classmethod
    def read(cls, reader, version):
        seq_id, variation_index = reader.read("<HH")
        if uses_global_timeline(version):
            start, end = reader.read("<II")
            if end < start:
                raise ParseError(f"Sequence {seq_id} ends ({end}) before it starts ({start})")
            duration = end - start
        else:
            start, duration = 0, reader.read_u32()

        movement_speed, flags, frequency, padding, replay_min, replay_max = reader.read("<fIhHII")

        if uses_split_blend_time(version):
            blend_in, blend_out = reader.read("<HH")
        else:
            blend_in = blend_out = reader.read_u32()

        bounds = reader.read("<7f")
        variation_next, alias_next = reader.read("<hH")
        return cls(
            id=seq_id,
            variation_index=variation_index,
            start_timestamp=start,
            duration=duration,
            movement_speed=movement_speed,
            flags=flags,
            frequency=frequency,
            padding=padding,
            replay_min=replay_min,
            replay_max=replay_max,
            blend_time_in=blend_in,
            blend_time_out=blend_out,
            bounds_min=bounds[0:3],
            bounds_max=bounds[3:6],
            bounds_radius=bounds[6],
            variation_next=variation_next,
            alias_next=alias_next,
        )

    def write(self, version) -> bytes:
        parts = [struct.pack("<HH", self.id, self.variation_index)]
        if uses_global_timeline(version):
            parts.append(struct.pack("<II", self.start_timestamp, self.end_timestamp))
        else:
            parts.append(struct.pack("<I", self.duration))

        parts.append(struct.pack(
            "<fIhHII", self.movement_speed, self.flags, self.frequency,
            self.padding, self.replay_min, self.replay_max,
        ))

        if uses_split_blend_time(version):
            parts.append(struct.pack("<HH", self.blend_time_in, self.blend_time_out))
        else:
            parts.append(struct.pack("<I", self.blend_time_in))

        parts.append(struct.pack("<7f", *self.bounds_min, *self.bounds_max, self.bounds_radius))
        parts.append(struct.pack("<hH", self.variation_next, self.alias_next))
        return b"".join(parts)


class SequenceCodec(RecordListCodec):
    """Sequences.

    Field mapping between versions:
    - into a global-timeline version, start timestamps are rebuilt as the
      running sum of the preceding durations;
    - out of one, start timestamps are dropped;
    - into a single blend-time version, blend_time = max(in, out);
    - into a split blend-time version, both halves must fit in u16,
      otherwise ``FieldOverflowError``.
    """

    tag = b"SEQS"
    record = M2Sequence

    def transform(self, value: List[M2Sequence], source, target):
        result = list(value)

        if uses_global_timeline(target) and not uses_global_timeline(source):
            cursor = 0
            for index, seq in enumerate(result):
                result[index] = replace(seq, start_timestamp=cursor)
                cursor += seq.duration
        elif not uses_global_timeline(target):
            result = [replace(seq, start_timestamp=0) for seq in result]

        if uses_split_blend_time(target):
            for seq in result:
                check_range(f"SEQS[{seq.id}].blend_time_in", seq.blend_time_in, 0, U16_MAX)
                check_range(f"SEQS[{seq.id}].blend_time_out", seq.blend_time_out, 0, U16_MAX)
        else:
            result = [
                replace(seq, blend_time_in=max(seq.blend_time_in, seq.blend_time_out),
                        blend_time_out=max(seq.blend_time_in, seq.blend_time_out))
                for seq in result
            ]
        return result
