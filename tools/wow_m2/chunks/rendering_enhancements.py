"""Rendering extension chunks added from Legion on.

All are fixed-layout tables. Those marked "per X" must hold exactly one
entry per entry of chunk X.

| Tag | Since | Entry | Notes |
|---|---|---|---|
| EXP2 | Legion | z_source f, unknown0 f, unknown1 f | per PRTE |
| PABC | Legion | u16 sequence id | parent animation blacklist |
| PSBC | Legion | min 3f, max 3f, radius f | per SEQS |
| PEDC | Legion | identifier 4s, data u32 | parent event data |
| TXAC | Legion | unknown0 u8, unknown1 u8 | per MATS |
| PGD1 | BfA | u16 geoset | per PRTE |
| WFV1 | BfA | version u32, bump_scale f, 3 × unknown f | single record |
| EDGF | BfA | start f, end f, scale f | edge fade |
| NERF | BfA | coefficient0 f, coefficient1 f | single record |
| DETL | BfA | flags u16, light_index u16, scale f | lighting details |
| GPID | Shadowlands | u32 geometry model file id | per PRTE |
| RPID | Shadowlands | u32 recursive model file id | |
| DBOC | Dragonflight | unknown0 f, unknown1 f, unknown2 u32, unknown3 u32 | single record |
| AFRA | Dragonflight | anim_id u16, sub_anim_id u16, frame u32 | |
| DPIV | Dragonflight | pivot 3f | |
"""
from typing import NamedTuple

from .base import StructCodec, StructListCodec


class ExtendedParticle(NamedTuple):
    z_source: float
    unknown0: float
    unknown1: float


class SequenceBounds(NamedTuple):
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float
    radius: float


class ParentEvent(NamedTuple):
    identifier: bytes
    data: int


class TextureCombiner(NamedTuple):
    unknown0: int
    unknown1: int


class Waterfall(NamedTuple):
    version: int
    bump_scale: float
    unknown0: float
    unknown1: float
    unknown2: float


class EdgeFade(NamedTuple):
    start: float
    end: float
    scale: float


class AlphaData(NamedTuple):
    coefficient0: float
    coefficient1: float


class LightingDetail(NamedTuple):
    flags: int
    light_index: int
    scale: float


class DbocData(NamedTuple):
    unknown0: float
    unknown1: float
    unknown2: int
    unknown3: int


class AnimationFrameRange(NamedTuple):
    anim_id: int
    sub_anim_id: int
    frame: int


class Pivot(NamedTuple):
    x: float
    y: float
    z: float


RENDERING_CODECS = (
    StructListCodec(b"EXP2", "<3f", ExtendedParticle),
    StructListCodec(b"PABC", "<H"),
    StructListCodec(b"PSBC", "<7f", SequenceBounds),
    StructListCodec(b"PEDC", "<4sI", ParentEvent),
    StructListCodec(b"TXAC", "<BB", TextureCombiner),
    StructListCodec(b"PGD1", "<H"),
    StructCodec(b"WFV1", "<I4f", Waterfall),
    StructListCodec(b"EDGF", "<3f", EdgeFade),
    StructCodec(b"NERF", "<2f", AlphaData),
    StructListCodec(b"DETL", "<HHf", LightingDetail),
    StructListCodec(b"GPID", "<I"),
    StructListCodec(b"RPID", "<I"),
    StructCodec(b"DBOC", "<2f2I", DbocData),
    StructListCodec(b"AFRA", "<HHI", AnimationFrameRange),
    StructListCodec(b"DPIV", "<3f", Pivot),
)
