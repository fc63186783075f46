"""Skin files: the submesh and index tables that go with an M2 model.

Two header layouts exist. Both describe the same three tables and load
into the same ``Skin`` lists.

Legacy (before WotLK), no tag, offsets absolute from the file start::

    vertex_count u32, vertex_offset u32,
    index_count u32, index_offset u32,
    submesh_count u32, submesh_offset u32,
    bone_count_max u32

Modern (WotLK and later), a "SKIN" chunk whose payload starts with the
same seven fields, offsets relative to the payload start::

    "SKIN" payload_size u32 | table ... data

Tables:
- vertex indices: u16 each, index into the model's VRTX list
- triangle indices: u16 each, index into the vertex index table
- submeshes: 10×u16 (submesh_id, level, vertex_start, vertex_count,
  index_start, index_count, bone_count, bone_combo_index,
  bone_influences, center_bone) + center 3f; modern records add
  sort_center 3f and sort_radius f (32 vs 48 bytes)
"""
import copy
import logging
import struct
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .binary import BinaryReader
from .chunk_reader import ChunkReader, write_chunk
from .errors import InvalidMagicError, TruncatedError
from .validation import ValidationError, ValidationErrorKind
from .version import M2Version

logger = logging.getLogger(__name__)

SKIN_TAG = b"SKIN"
_TABLE = struct.Struct("<7I")
_SUBMESH_BASE = struct.Struct("<10H3f")
_SUBMESH_SORT = struct.Struct("<3ff")


class SkinFormat(Enum):
    LEGACY = "legacy"
    MODERN = "modern"

    @classmethod
    def for_version(cls, version: M2Version) -> "SkinFormat":
        return cls.MODERN if version.uses_modern_skin else cls.LEGACY


@dataclass
class SkinTable:
    """Count/offset pointer table common to both header layouts."""

    vertex_count: int = 0
    vertex_offset: int = 0
    index_count: int = 0
    index_offset: int = 0
    submesh_count: int = 0
    submesh_offset: int = 0
    bone_count_max: int = 0

    @classmethod
    def read(cls, reader: BinaryReader) -> "SkinTable":
        return cls(*reader.read(_TABLE.format))

    def write(self) -> bytes:
        return _TABLE.pack(
            self.vertex_count, self.vertex_offset, self.index_count, self.index_offset,
            self.submesh_count, self.submesh_offset, self.bone_count_max,
        )


@dataclass
class LegacySkinHeader:
    table: SkinTable


@dataclass
class ModernSkinHeader:
    table: SkinTable
    payload_size: int = 0


@dataclass
class SkinSubmesh:
    submesh_id: int = 0
    level: int = 0
    vertex_start: int = 0
    vertex_count: int = 0
    index_start: int = 0
    index_count: int = 0
    bone_count: int = 0
    bone_combo_index: int = 0
    bone_influences: int = 0
    center_bone: int = 0
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    sort_center: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    sort_radius: float = 0.0

    @staticmethod
    def record_size(skin_format: SkinFormat) -> int:
        size = _SUBMESH_BASE.size
        if skin_format is SkinFormat.MODERN:
            size += _SUBMESH_SORT.size
        return size

    @classmethod
    def read(cls, reader: BinaryReader, skin_format: SkinFormat) -> "SkinSubmesh":
        v = reader.read(_SUBMESH_BASE.format)
        submesh = cls(*v[0:10], center=v[10:13])
        if skin_format is SkinFormat.MODERN:
            sort = reader.read(_SUBMESH_SORT.format)
            submesh.sort_center = sort[0:3]
            submesh.sort_radius = sort[3]
        return submesh

    def write(self, skin_format: SkinFormat) -> bytes:
        data = _SUBMESH_BASE.pack(
            self.submesh_id, self.level, self.vertex_start, self.vertex_count,
            self.index_start, self.index_count, self.bone_count, self.bone_combo_index,
            self.bone_influences, self.center_bone, *self.center,
        )
        if skin_format is SkinFormat.MODERN:
            data += _SUBMESH_SORT.pack(*self.sort_center, self.sort_radius)
        return data


def detect_skin_format(data: bytes) -> SkinFormat:
    """Modern skins start with the "SKIN" tag, legacy ones with a count."""
    return SkinFormat.MODERN if data[:4] == SKIN_TAG else SkinFormat.LEGACY


def _read_tables(data: bytes, table: SkinTable, skin_format: SkinFormat):
    def reader_at(offset, what):
        if offset > len(data):
            raise TruncatedError(offset, len(data), f"skin {what}")
        return BinaryReader(data, offset, context=f"skin {what}")

    vertex_indices = reader_at(table.vertex_offset, "vertex indices").read_array("<H", table.vertex_count)
    triangle_indices = reader_at(table.index_offset, "triangle indices").read_array("<H", table.index_count)
    submesh_reader = reader_at(table.submesh_offset, "submeshes")
    submeshes = [SkinSubmesh.read(submesh_reader, skin_format) for _ in range(table.submesh_count)]
    return vertex_indices, triangle_indices, submeshes


@dataclass
class Skin:
    """Submesh and index tables, independent of the header layout."""

    header: Union[LegacySkinHeader, ModernSkinHeader]
    vertex_indices: List[int] = field(default_factory=list)
    triangle_indices: List[int] = field(default_factory=list)
    submeshes: List[SkinSubmesh] = field(default_factory=list)
    bone_count_max: int = 0

    @property
    def format(self) -> SkinFormat:
        if isinstance(self.header, ModernSkinHeader):
            return SkinFormat.MODERN
        return SkinFormat.LEGACY

    @classmethod
    def load(cls, path: Union[str, Path], mode: Optional[SkinFormat] = None) -> "Skin":
        """Read a skin file.

        Args:
            path: Skin file path
            mode: Header layout to expect; None detects it from the data
        """
        with open(path, "rb") as f:
            data = f.read()
        return cls.from_bytes(data, mode)

    @classmethod
    def from_bytes(cls, data: bytes, mode: Optional[SkinFormat] = None) -> "Skin":
        skin_format = mode or detect_skin_format(data)

        if skin_format is SkinFormat.MODERN:
            if data[:4] != SKIN_TAG:
                raise InvalidMagicError(bytes(data[:4]), SKIN_TAG)
            record = next(ChunkReader(data))
            payload = record.payload
            table = SkinTable.read(BinaryReader(payload, context="skin header"))
            header = ModernSkinHeader(table, record.size)
        else:
            payload = data
            table = SkinTable.read(BinaryReader(payload, context="skin header"))
            header = LegacySkinHeader(table)

        vertex_indices, triangle_indices, submeshes = _read_tables(payload, table, skin_format)
        logger.debug(
            "Loaded %s skin: %d vertices, %d indices, %d submeshes",
            skin_format.value, len(vertex_indices), len(triangle_indices), len(submeshes),
        )
        return cls(header, vertex_indices, triangle_indices, submeshes, table.bone_count_max)

    def to_bytes(self, version: Optional[M2Version] = None) -> bytes:
        """Encode with the layout ``version`` uses (the loaded layout if None)."""
        skin_format = SkinFormat.for_version(version) if version is not None else self.format
        if skin_format is SkinFormat.LEGACY and any(
            s.sort_radius or any(s.sort_center) for s in self.submeshes
        ):
            logger.info("Legacy skin layout has no sort center/radius; dropping them")

        vertex_data = struct.pack(f"<{len(self.vertex_indices)}H", *self.vertex_indices)
        index_data = struct.pack(f"<{len(self.triangle_indices)}H", *self.triangle_indices)
        submesh_data = b"".join(s.write(skin_format) for s in self.submeshes)

        vertex_offset = _TABLE.size
        index_offset = vertex_offset + len(vertex_data)
        submesh_offset = index_offset + len(index_data)
        table = SkinTable(
            len(self.vertex_indices), vertex_offset,
            len(self.triangle_indices), index_offset,
            len(self.submeshes), submesh_offset,
            self.bone_count_max,
        )
        body = table.write() + vertex_data + index_data + submesh_data

        if skin_format is SkinFormat.MODERN:
            return write_chunk(SKIN_TAG, body)
        return body

    def save(self, path: Union[str, Path], version: Optional[M2Version] = None):
        data = self.to_bytes(version)
        with open(path, "wb") as f:
            f.write(data)

    def convert(self, version: M2Version) -> "Skin":
        """Copy of this skin re-read in the layout ``version`` uses."""
        return Skin.from_bytes(self.to_bytes(version))

    def validate(self) -> List[ValidationError]:
        """Check every submesh range and triangle index against the tables."""
        errors = []
        vertex_total = len(self.vertex_indices)
        index_total = len(self.triangle_indices)

        def out_of_bounds(message):
            errors.append(ValidationError(ValidationErrorKind.OUT_OF_BOUNDS_INDEX, SKIN_TAG, message))

        for i, submesh in enumerate(self.submeshes):
            if submesh.vertex_start + submesh.vertex_count > vertex_total:
                out_of_bounds(
                    f"submesh {i} vertices {submesh.vertex_start}+{submesh.vertex_count} "
                    f"exceed {vertex_total} vertex indices"
                )
            if submesh.index_start + submesh.index_count > index_total:
                out_of_bounds(
                    f"submesh {i} indices {submesh.index_start}+{submesh.index_count} "
                    f"exceed {index_total} triangle indices"
                )

        for position, index in enumerate(self.triangle_indices):
            if index >= vertex_total:
                out_of_bounds(f"triangle index {position} = {index}, only {vertex_total} vertex indices")
        return errors

    def copy(self) -> "Skin":
        return copy.deepcopy(self)
