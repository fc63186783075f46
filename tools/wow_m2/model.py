"""M2 model files: fixed header plus a stream of tagged chunks.

File layout:
- magic "MD20" (4 bytes)
- version u32 (see ``M2Version``)
- name: u32 length + UTF-8 bytes
- global_flags u32
- bounding box min 3f, max 3f, bounding radius f
- chunks: {tag 4s, size u32, payload} until the end of the file
"""
import copy
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .binary import BinaryReader, pack_string
from .chunk_reader import ChunkReader, write_chunk
from .chunks import RawChunk, get_codec
from .errors import DuplicateChunkError, IllegalChunkForVersionError, InvalidMagicError
from .validation import ValidationError, validate_chunks
from .version import M2Version, is_chunk_legal, layout_order

logger = logging.getLogger(__name__)


@dataclass
class M2Header:
    """Header fields shared by every version."""

    MAGIC = b"MD20"

    version: M2Version
    name: str = ""
    global_flags: int = 0
    bounding_box_min: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounding_box_max: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    bounding_radius: float = 0.0

    @classmethod
    def read(cls, reader: BinaryReader) -> "M2Header":
        magic = reader.read_bytes(4)
        if magic != cls.MAGIC:
            raise InvalidMagicError(magic, cls.MAGIC)

        version = M2Version.from_header_version(reader.read_u32())
        name = reader.read_string()
        global_flags = reader.read_u32()
        bounds = reader.read("<7f")
        return cls(
            version=version,
            name=name,
            global_flags=global_flags,
            bounding_box_min=bounds[0:3],
            bounding_box_max=bounds[3:6],
            bounding_radius=bounds[6],
        )

    def write(self) -> bytes:
        return b"".join((
            self.MAGIC,
            struct.pack("<I", int(self.version)),
            pack_string(self.name),
            struct.pack("<I", self.global_flags),
            struct.pack("<7f", *self.bounding_box_min, *self.bounding_box_max, self.bounding_radius),
        ))


class M2Model:
    """A decoded model: header plus one value per chunk tag.

    ``chunks`` maps each tag to its decoded value (``RawChunk`` for tags
    without a codec), in the order the tags were first seen.
    """

    def __init__(self, header: M2Header, chunks: Optional[Dict[bytes, Any]] = None):
        self.header = header
        self.chunks: Dict[bytes, Any] = dict(chunks or {})

    @property
    def version(self) -> M2Version:
        return self.header.version

    @classmethod
    def load(cls, path: Union[str, Path]) -> "M2Model":
        """Read and decode an M2 file."""
        with open(path, "rb") as f:
            data = f.read()
        return cls.from_bytes(data)

    @classmethod
    def from_bytes(cls, data: bytes) -> "M2Model":
        """Decode a complete M2 file image.

        Raises:
            TruncatedError: Header or a chunk runs past the end of data
            InvalidMagicError: Data does not start with "MD20"
            UnknownVersionError: Header version is not a known release
            IllegalChunkForVersionError: A chunk the version forbids is present
            DuplicateChunkError: A non-repeatable chunk appears twice
        """
        reader = BinaryReader(data, context="M2 header")
        header = M2Header.read(reader)
        version = header.version

        chunks: Dict[bytes, Any] = {}
        for record in ChunkReader(data, reader.offset):
            tag = record.tag
            codec = get_codec(tag)
            if codec is None:
                value = RawChunk(tag, record.payload)
            else:
                if not is_chunk_legal(tag, version):
                    raise IllegalChunkForVersionError(tag, version)
                value = codec.decode(record.payload, version)

            logger.debug("Chunk %s: %d bytes at offset %d", record.name, record.size, record.offset)

            if tag in chunks:
                if codec is None:
                    raise DuplicateChunkError(tag)
                value = codec.merge(chunks[tag], value)
            chunks[tag] = value

        return cls(header, chunks)

    def to_bytes(self) -> bytes:
        """Encode header and chunks in the order this version lays them out."""
        version = self.version
        for tag in self.chunks:
            if not is_chunk_legal(tag, version):
                raise IllegalChunkForVersionError(tag, version)

        parts = [self.header.write()]
        for tag in layout_order(version, self.chunks):
            value = self.chunks[tag]
            if isinstance(value, RawChunk):
                payload = value.data
            else:
                payload = get_codec(tag).encode(value, version)
            parts.append(write_chunk(tag, payload))
        return b"".join(parts)

    def save(self, path: Union[str, Path]):
        data = self.to_bytes()
        with open(path, "wb") as f:
            f.write(data)

    def validate(self) -> List[ValidationError]:
        """Check cross-chunk references and counts.

        Returns:
            Every finding; an empty list means the model is consistent
        """
        return validate_chunks(self.chunks)

    def get_chunk(self, tag: bytes, default=None):
        return self.chunks.get(tag, default)

    def has_chunk(self, tag: bytes) -> bool:
        return tag in self.chunks

    def chunk_tags(self) -> List[bytes]:
        return list(self.chunks)

    def summary(self) -> Dict[str, int]:
        """Entry count per chunk keyed by tag name (payload size for raw chunks)."""
        counts = {}
        for tag, value in self.chunks.items():
            name = tag.decode("ascii", errors="replace")
            if isinstance(value, RawChunk):
                counts[name] = len(value.data)
            else:
                counts[name] = get_codec(tag).entry_count(value)
        return counts

    def copy(self) -> "M2Model":
        return M2Model(copy.deepcopy(self.header), copy.deepcopy(self.chunks))

    def __eq__(self, other) -> bool:
        if not isinstance(other, M2Model):
            return NotImplemented
        return self.header == other.header and self.chunks == other.chunks

    def __repr__(self) -> str:
        tags = ", ".join(tag.decode("ascii", errors="replace") for tag in self.chunks)
        return f"M2Model({self.version.name}, name={self.header.name!r}, chunks=[{tags}])"
