"""Chunk codecs, keyed by tag."""
from typing import Dict, Optional

from .attachment import AttachmentCodec, M2Attachment, M2AttachmentType
from .base import ChunkCodec, RawChunk
from .bone import BoneCodec, M2Bone, M2BoneFlags
from .camera import CameraCodec, M2Camera, M2CameraType
from .color_animation import ColorAnimationCodec, M2ColorAnimation
from .event import EventCodec, M2Event
from .file_references import FILE_REFERENCE_CODECS, AnimationFileId, LodData
from .light import LightCodec, M2Light, M2LightType
from .material import M2BlendMode, M2Material, M2RenderFlags, MaterialCodec
from .particle_emitter import M2ParticleEmitter, M2ParticleEmitterType, M2ParticleFlags, ParticleEmitterCodec
from .physics import M2PhysicsData, M2PhysicsJoint, M2PhysicsShape, PhysicsCodec
from .rendering_enhancements import RENDERING_CODECS, ExtendedParticle, SequenceBounds
from .ribbon_emitter import M2RibbonEmitter, RibbonEmitterCodec
from .sequence import M2Sequence, SequenceCodec
from .texture import M2Texture, M2TextureFlags, M2TextureType, TextureCodec
from .texture_animation import M2TextureAnimation, M2TextureAnimationType, TextureAnimationCodec
from .track import AnimationTrack, InterpolationType, TrackKey
from .transparency_animation import M2TransparencyAnimation, TransparencyAnimationCodec
from .vertex import M2Vertex, VertexCodec

CODECS: Dict[bytes, ChunkCodec] = {
    codec.tag: codec
    for codec in (
        BoneCodec(),
        SequenceCodec(),
        TextureCodec(),
        MaterialCodec(),
        ParticleEmitterCodec(),
        RibbonEmitterCodec(),
        CameraCodec(),
        LightCodec(),
        EventCodec(),
        AttachmentCodec(),
        PhysicsCodec(),
        ColorAnimationCodec(),
        TextureAnimationCodec(),
        TransparencyAnimationCodec(),
        VertexCodec(),
        *FILE_REFERENCE_CODECS,
        *RENDERING_CODECS,
    )
}


def get_codec(tag: bytes) -> Optional[ChunkCodec]:
    """Codec for ``tag``, or None for tags kept as raw payloads."""
    return CODECS.get(tag)


__all__ = [
    "CODECS",
    "get_codec",
    "ChunkCodec",
    "RawChunk",
    "AnimationFileId",
    "AnimationTrack",
    "ExtendedParticle",
    "InterpolationType",
    "LodData",
    "M2Attachment",
    "M2AttachmentType",
    "M2BlendMode",
    "M2Bone",
    "M2BoneFlags",
    "M2Camera",
    "M2CameraType",
    "M2ColorAnimation",
    "M2Event",
    "M2Light",
    "M2LightType",
    "M2Material",
    "M2ParticleEmitter",
    "M2ParticleEmitterType",
    "M2ParticleFlags",
    "M2PhysicsData",
    "M2PhysicsJoint",
    "M2PhysicsShape",
    "M2RenderFlags",
    "M2RibbonEmitter",
    "M2Sequence",
    "M2Texture",
    "M2TextureAnimation",
    "M2TextureAnimationType",
    "M2TextureFlags",
    "M2TextureType",
    "M2TransparencyAnimation",
    "M2Vertex",
    "SequenceBounds",
    "TrackKey",
]
