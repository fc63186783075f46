"""World of Warcraft M2 model format tools."""
from .anim import AnimFile, AnimFormat, AnimMemoryUsage, AnimSection, BoneAnimation, StructureHints
from .chunk_reader import ChunkReader, ChunkRecord
from .converter import M2Converter
from .errors import (
    CannotDropRequiredChunkError,
    ConversionError,
    DuplicateChunkError,
    FieldOverflowError,
    IllegalChunkForVersionError,
    InvalidMagicError,
    M2Error,
    MissingRequiredChunkError,
    ParseError,
    PostConversionValidationFailedError,
    TruncatedError,
    UnknownVersionError,
)
from .model import M2Header, M2Model
from .skin import Skin, SkinFormat, SkinSubmesh
from .validation import ValidationError, ValidationErrorKind
from .version import M2Version

__all__ = [
    "AnimFile",
    "AnimFormat",
    "AnimMemoryUsage",
    "AnimSection",
    "BoneAnimation",
    "StructureHints",
    "ChunkReader",
    "ChunkRecord",
    "M2Converter",
    "M2Error",
    "ParseError",
    "TruncatedError",
    "InvalidMagicError",
    "UnknownVersionError",
    "IllegalChunkForVersionError",
    "DuplicateChunkError",
    "ConversionError",
    "CannotDropRequiredChunkError",
    "MissingRequiredChunkError",
    "FieldOverflowError",
    "PostConversionValidationFailedError",
    "M2Header",
    "M2Model",
    "Skin",
    "SkinFormat",
    "SkinSubmesh",
    "ValidationError",
    "ValidationErrorKind",
    "M2Version",
]
