"""External ANIM files holding per-bone keyframe data.

Two on-disk layouts carry the same sections:

Modern (Legion and later)::

    magic "AFM2", version u32, id_count u32, entry_offset u32
    sections...
    entry table at entry_offset: id_count × {id u32, offset u32, size u32}

Legacy (before Legion): sections back to back with no header at all, so
the layout can only be recognised heuristically.

Section layout, shared by both::

    id u32, start u32, end u32, bone_count u32
    per bone: bone_id u16, translation_interp u8, rotation_interp u8,
              scaling_interp u8, padding u8
              translation: u32 count + {timestamp u32, 3f}
              rotation:    u32 count + {timestamp u32, 4×i16}
              scaling:     u32 count + {timestamp u32, 3f}

Rotations stay in their compressed i16 quaternion form.
"""
import copy
import logging
import struct
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .binary import BinaryReader
from .chunks.track import AnimationTrack, TrackKey, parse_interpolation
from .errors import ParseError, TruncatedError
from .version import M2Version

logger = logging.getLogger(__name__)

ANIM_MAGIC = b"AFM2"
MODERN_ANIM_VERSION = 1
MAX_MODERN_ANIM_VERSION = 16
MAX_PLAUSIBLE_BONES = 1024

_MODERN_HEADER = struct.Struct("<4sIII")
_ENTRY = struct.Struct("<III")
_SECTION_HEADER = struct.Struct("<IIII")
_BONE_HEADER = struct.Struct("<HBBBB")

_TRANSLATION_VALUE = "3f"
_ROTATION_VALUE = "4h"
_SCALING_VALUE = "3f"

# Byte cost model used by memory_usage().
TRANSLATION_KEY_SIZE = 16
ROTATION_KEY_SIZE = 12
SCALING_KEY_SIZE = 16
SECTION_HEADER_SIZE = _SECTION_HEADER.size
BONE_HEADER_SIZE = _BONE_HEADER.size + 3 * 4


class AnimFormat(Enum):
    LEGACY = "legacy"
    MODERN = "modern"

    @classmethod
    def for_version(cls, version: M2Version) -> "AnimFormat":
        return cls.MODERN if version.uses_modern_anim else cls.LEGACY


@dataclass
class BoneAnimation:
    bone_id: int
    translation: AnimationTrack = field(default_factory=AnimationTrack)
    rotation: AnimationTrack = field(default_factory=AnimationTrack)
    scaling: AnimationTrack = field(default_factory=AnimationTrack)

    def tracks(self) -> Tuple[AnimationTrack, AnimationTrack, AnimationTrack]:
        return self.translation, self.rotation, self.scaling


@dataclass
class AnimSectionHeader:
    id: int
    start: int = 0
    end: int = 0


@dataclass
class AnimSection:
    header: AnimSectionHeader
    bone_animations: List[BoneAnimation] = field(default_factory=list)

    @property
    def keyframe_count(self) -> int:
        return sum(track.key_count for bone in self.bone_animations for track in bone.tracks())


@dataclass
class StructureHints:
    """Outcome of the legacy layout heuristic.

    ``appears_valid`` is a confidence signal, not a guarantee.
    """

    appears_valid: bool = False
    estimated_blocks: int = 0
    has_timestamps: bool = False


@dataclass
class LegacyAnimMetadata:
    file_size: int
    animation_count: int
    structure_hints: StructureHints
    trailing_data: bytes = b""


@dataclass
class ModernAnimHeader:
    version: int
    id_count: int
    anim_entry_offset: int


@dataclass
class AnimEntry:
    id: int
    offset: int
    size: int


@dataclass
class ModernAnimMetadata:
    header: ModernAnimHeader
    entries: List[AnimEntry] = field(default_factory=list)
    # Heuristic result of the legacy file this was transcoded from.
    source_hints: Optional[StructureHints] = field(default=None, compare=False)


@dataclass
class AnimMemoryUsage:
    sections: int = 0
    bone_animations: int = 0
    translation_keyframes: int = 0
    rotation_keyframes: int = 0
    scaling_keyframes: int = 0
    approximate_bytes: int = 0

    def total_keyframes(self) -> int:
        return self.translation_keyframes + self.rotation_keyframes + self.scaling_keyframes


def decompress_quaternion(values: Tuple[int, int, int, int]) -> Tuple[float, ...]:
    """Expand an i16-compressed quaternion to floats in -1.0..1.0."""
    return tuple(
        (v + 32768) / 32767.0 if v < 0 else (v - 32767) / 32767.0
        for v in values
    )


def _read_keys(reader: BinaryReader, interpolation: int, value_fmt: str) -> AnimationTrack:
    count = reader.read_u32()
    key_fmt = "<I" + value_fmt
    needed = count * struct.calcsize(key_fmt)
    if needed > reader.remaining:
        raise TruncatedError(needed, reader.remaining, reader.context)

    keys = []
    for _ in range(count):
        values = reader.read(key_fmt)
        keys.append(TrackKey(values[0], values[1:]))
    return AnimationTrack(parse_interpolation(interpolation), keys)


def _read_section(reader: BinaryReader) -> AnimSection:
    section_id, start, end, bone_count = reader.read(_SECTION_HEADER.format)
    if end < start:
        raise ParseError(f"ANIM section {section_id} ends ({end}) before it starts ({start})")
    if bone_count > MAX_PLAUSIBLE_BONES:
        raise ParseError(f"ANIM section {section_id} claims {bone_count} bones")

    bones = []
    for _ in range(bone_count):
        bone_id, t_interp, r_interp, s_interp, _padding = reader.read(_BONE_HEADER.format)
        bones.append(BoneAnimation(
            bone_id,
            _read_keys(reader, t_interp, _TRANSLATION_VALUE),
            _read_keys(reader, r_interp, _ROTATION_VALUE),
            _read_keys(reader, s_interp, _SCALING_VALUE),
        ))
    return AnimSection(AnimSectionHeader(section_id, start, end), bones)


def _write_keys(track: AnimationTrack, value_fmt: str) -> bytes:
    key = struct.Struct("<I" + value_fmt)
    parts = [struct.pack("<I", len(track.keys))]
    parts.extend(key.pack(k.timestamp, *k.value) for k in track.keys)
    return b"".join(parts)


def _write_section(section: AnimSection) -> bytes:
    header = section.header
    parts = [_SECTION_HEADER.pack(header.id, header.start, header.end, len(section.bone_animations))]
    for bone in section.bone_animations:
        parts.append(_BONE_HEADER.pack(
            bone.bone_id, int(bone.translation.interpolation),
            int(bone.rotation.interpolation), int(bone.scaling.interpolation), 0,
        ))
        parts.append(_write_keys(bone.translation, _TRANSLATION_VALUE))
        parts.append(_write_keys(bone.rotation, _ROTATION_VALUE))
        parts.append(_write_keys(bone.scaling, _SCALING_VALUE))
    return b"".join(parts)


def _keys_in_range(section: AnimSection) -> bool:
    start, end = section.header.start, section.header.end
    for bone in section.bone_animations:
        for track in bone.tracks():
            previous = start
            for key in track.keys:
                if not previous <= key.timestamp <= end:
                    return False
                previous = key.timestamp
    return True


def _structure_hints(sections: List[AnimSection], trailing: bytes) -> StructureHints:
    has_timestamps = any(
        section.header.end > 0
        or any(key.timestamp for bone in section.bone_animations
               for track in bone.tracks() for key in track.keys)
        for section in sections
    )
    appears_valid = (
        bool(sections)
        and not trailing
        and all(_keys_in_range(section) for section in sections)
    )
    return StructureHints(appears_valid, len(sections), has_timestamps)


def is_modern_anim(data: bytes) -> bool:
    """Check for the "AFM2" magic and a plausible version field."""
    if len(data) < _MODERN_HEADER.size or data[:4] != ANIM_MAGIC:
        return False
    version = struct.unpack_from("<I", data, 4)[0]
    return 1 <= version <= MAX_MODERN_ANIM_VERSION


def _parse_modern(data: bytes):
    magic, version, id_count, entry_offset = _MODERN_HEADER.unpack_from(data, 0)
    if entry_offset > len(data):
        raise TruncatedError(entry_offset, len(data), "ANIM entry table")

    table = BinaryReader(data, entry_offset, context="ANIM entry table")
    entries = [AnimEntry(*table.read(_ENTRY.format)) for _ in range(id_count)]

    sections = []
    for entry in entries:
        end = entry.offset + entry.size
        if end > len(data):
            raise TruncatedError(end, len(data), f"ANIM section {entry.id}")
        reader = BinaryReader(data[entry.offset:end], context=f"ANIM section {entry.id}")
        sections.append(_read_section(reader))
        reader.expect_end()

    metadata = ModernAnimMetadata(ModernAnimHeader(version, id_count, entry_offset), entries)
    return metadata, sections


def _parse_legacy(data: bytes):
    reader = BinaryReader(data, context="legacy ANIM block")
    sections = []
    while reader.remaining >= SECTION_HEADER_SIZE:
        block_start = reader.offset
        try:
            sections.append(_read_section(reader))
        except ParseError as e:
            # End of plausible blocks; the rest is kept verbatim.
            logger.debug("Legacy ANIM scan stopped at offset %d: %s", block_start, e)
            reader.offset = block_start
            break

    trailing = bytes(data[reader.offset:])
    hints = _structure_hints(sections, trailing)
    logger.debug(
        "Legacy ANIM: %d blocks, %d trailing bytes, appears_valid=%s",
        len(sections), len(trailing), hints.appears_valid,
    )
    return LegacyAnimMetadata(len(data), len(sections), hints, trailing), sections


def _build_modern(sections: List[AnimSection], anim_version: int):
    body = []
    entries = []
    offset = _MODERN_HEADER.size
    for section in sections:
        encoded = _write_section(section)
        entries.append(AnimEntry(section.header.id, offset, len(encoded)))
        body.append(encoded)
        offset += len(encoded)

    header = ModernAnimHeader(anim_version, len(sections), offset)
    data = b"".join((
        _MODERN_HEADER.pack(ANIM_MAGIC, header.version, header.id_count, header.anim_entry_offset),
        *body,
        *(_ENTRY.pack(e.id, e.offset, e.size) for e in entries),
    ))
    return data, ModernAnimMetadata(header, entries)


def _build_legacy(sections: List[AnimSection], trailing: bytes = b""):
    data = b"".join(_write_section(section) for section in sections) + trailing
    hints = _structure_hints(sections, trailing)
    return data, LegacyAnimMetadata(len(data), len(sections), hints, trailing)


@dataclass
class AnimFile:
    """A decoded ANIM file.

    ``version`` is the model version the file was loaded or converted
    for; it is not stored on disk and does not take part in equality.
    """

    format: AnimFormat
    metadata: Union[LegacyAnimMetadata, ModernAnimMetadata]
    sections: List[AnimSection] = field(default_factory=list)
    version: Optional[M2Version] = field(default=None, compare=False)

    @classmethod
    def load(cls, path: Union[str, Path], version: Optional[M2Version] = None) -> "AnimFile":
        with open(path, "rb") as f:
            data = f.read()
        return cls.from_bytes(data, version)

    @classmethod
    def from_bytes(cls, data: bytes, version: Optional[M2Version] = None) -> "AnimFile":
        """Decode ANIM data, trying the modern layout first.

        Data without the modern header is scanned as legacy blocks; that
        never fails, but the structure hints may report low confidence.
        """
        if is_modern_anim(data):
            metadata, sections = _parse_modern(data)
            return cls(AnimFormat.MODERN, metadata, sections, version)

        metadata, sections = _parse_legacy(data)
        return cls(AnimFormat.LEGACY, metadata, sections, version)

    def to_bytes(self) -> bytes:
        if self.format is AnimFormat.MODERN:
            return _build_modern(self.sections, self.metadata.header.version)[0]
        return _build_legacy(self.sections, self.metadata.trailing_data)[0]

    def save(self, path: Union[str, Path]):
        data = self.to_bytes()
        with open(path, "wb") as f:
            f.write(data)

    def animation_count(self) -> int:
        return len(self.sections)

    def is_legacy_format(self) -> bool:
        return self.format is AnimFormat.LEGACY

    @property
    def structure_hints(self) -> Optional[StructureHints]:
        """Legacy heuristic result, also kept after transcoding to modern."""
        if isinstance(self.metadata, LegacyAnimMetadata):
            return self.metadata.structure_hints
        return self.metadata.source_hints

    def get_section(self, anim_id: int) -> Optional[AnimSection]:
        return next((s for s in self.sections if s.header.id == anim_id), None)

    def memory_usage(self) -> AnimMemoryUsage:
        usage = AnimMemoryUsage(sections=len(self.sections))
        for section in self.sections:
            usage.bone_animations += len(section.bone_animations)
            for bone in section.bone_animations:
                usage.translation_keyframes += bone.translation.key_count
                usage.rotation_keyframes += bone.rotation.key_count
                usage.scaling_keyframes += bone.scaling.key_count

        usage.approximate_bytes = (
            usage.sections * SECTION_HEADER_SIZE
            + usage.bone_animations * BONE_HEADER_SIZE
            + usage.translation_keyframes * TRANSLATION_KEY_SIZE
            + usage.rotation_keyframes * ROTATION_KEY_SIZE
            + usage.scaling_keyframes * SCALING_KEY_SIZE
        )
        return usage

    def convert(self, target: M2Version) -> "AnimFile":
        """Return a copy in the layout ``target`` requires.

        Keyframe data is carried over unchanged. Legacy to modern builds a
        fresh entry table from the detected blocks and drops undecoded
        trailing bytes; modern to legacy drops the entry table.
        """
        required = AnimFormat.for_version(target)
        if required is self.format:
            return replace(copy.deepcopy(self), version=target)

        sections = copy.deepcopy(self.sections)
        if required is AnimFormat.MODERN:
            hints = self.metadata.structure_hints
            if self.metadata.trailing_data:
                logger.info("Dropping %d undecoded trailing bytes", len(self.metadata.trailing_data))
            if not hints.appears_valid:
                logger.warning("Transcoding a low-confidence legacy ANIM structure")
            _, metadata = _build_modern(sections, MODERN_ANIM_VERSION)
            metadata.source_hints = copy.deepcopy(hints)
        else:
            _, metadata = _build_legacy(sections)

        logger.info("Transcoded ANIM from %s to %s layout", self.format.value, required.value)
        return AnimFile(required, metadata, sections, target)
