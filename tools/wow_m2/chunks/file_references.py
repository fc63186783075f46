"""File data id tables (Legion and later).

From Legion on, externally stored parts of a model (skins, animation
files, bone files, textures, physics) are addressed by numeric file data
ids instead of file names.

| Tag | Since | Payload |
|---|---|---|
| SFID | Legion | u32 count + u32 skin file ids (required, defaults to empty) |
| AFID | Legion | u32 count + {anim_id u16, sub_anim_id u16, file_id u32}; may repeat |
| BFID | Legion | u32 count + u32 bone file ids |
| TXID | Legion | u32 count + u32 texture file ids, one per TEXS entry |
| PFID | Legion | u32 physics file id |
| SKID | BfA | u32 skeleton file id; the skeleton lives in a separate file |
| LDV1 | BfA | unknown0 u16, lod_count u16, unknown1 f, particle_bone_lod 4B, unknown2 u32 |
"""
from typing import NamedTuple

from .base import RepeatableStructListCodec, StructCodec, StructListCodec


class AnimationFileId(NamedTuple):
    anim_id: int
    sub_anim_id: int
    file_id: int


class LodData(NamedTuple):
    unknown0: int
    lod_count: int
    unknown1: float
    particle_bone_lod0: int
    particle_bone_lod1: int
    particle_bone_lod2: int
    particle_bone_lod3: int
    unknown2: int


SKIN_FILE_IDS = StructListCodec(b"SFID", "<I", default_empty=True)
ANIMATION_FILE_IDS = RepeatableStructListCodec(b"AFID", "<HHI", AnimationFileId)
BONE_FILE_IDS = StructListCodec(b"BFID", "<I")
TEXTURE_FILE_IDS = StructListCodec(b"TXID", "<I")
PHYSICS_FILE_ID = StructCodec(b"PFID", "<I")
SKELETON_FILE_ID = StructCodec(b"SKID", "<I")
LOD_DATA = StructCodec(b"LDV1", "<HHf4BI", LodData)

FILE_REFERENCE_CODECS = (
    SKIN_FILE_IDS,
    ANIMATION_FILE_IDS,
    BONE_FILE_IDS,
    TEXTURE_FILE_IDS,
    PHYSICS_FILE_ID,
    SKELETON_FILE_ID,
    LOD_DATA,
)
