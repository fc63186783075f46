"""Codec building blocks shared by the chunk modules."""
import struct
from dataclasses import dataclass
from typing import Any, Optional

from ..binary import BinaryReader
from ..errors import DuplicateChunkError
from ..version import M2Version


@dataclass
class RawChunk:
    """Payload of a chunk this package does not decode."""

    tag: bytes
    data: bytes


class ChunkCodec:
    """Decodes, encodes and converts the payload of one chunk tag.

    ``transform`` is a pure function from a value laid out for ``source``
    to the equivalent value for ``target``. The default is the identity,
    for chunks whose layout never changed.
    """

    tag: bytes = b""

    @property
    def name(self) -> str:
        return self.tag.decode("ascii", errors="replace")

    def decode(self, payload: bytes, version: M2Version) -> Any:
        raise NotImplementedError

    def encode(self, value: Any, version: M2Version) -> bytes:
        raise NotImplementedError

    def transform(self, value: Any, source: M2Version, target: M2Version) -> Any:
        return value

    def default(self) -> Optional[Any]:
        """Value to synthesise when a version requires this chunk.

        None means no safe default exists.
        """
        return None

    def merge(self, existing: Any, value: Any) -> Any:
        """Combine a repeated occurrence into the first one."""
        raise DuplicateChunkError(self.tag)

    def entry_count(self, value: Any) -> int:
        return len(value) if isinstance(value, list) else 1


class RecordListCodec(ChunkCodec):
    """Payload is a u32 count followed by ``record`` entries.

    ``record`` is a class with ``read(reader, version)`` and
    ``write(version)`` for records whose layout depends on the version.
    """

    record = None

    def decode(self, payload, version):
        reader = BinaryReader(payload, context=self.name)
        count = reader.read_u32()
        records = [self.record.read(reader, version) for _ in range(count)]
        reader.expect_end()
        return records

    def encode(self, value, version):
        parts = [struct.pack("<I", len(value))]
        parts.extend(record.write(version) for record in value)
        return b"".join(parts)


class StructListCodec(ChunkCodec):
    """Payload is a u32 count followed by fixed-layout entries.

    Entries are ``record_type`` tuples, or plain scalars when the format
    holds a single field and no ``record_type`` is given.
    """

    def __init__(self, tag: bytes, fmt: str, record_type=None, default_empty=False):
        self.tag = tag
        self.fmt = fmt if fmt.startswith("<") else "<" + fmt
        self.record_type = record_type
        self.default_empty = default_empty

    def decode(self, payload, version):
        reader = BinaryReader(payload, context=self.name)
        count = reader.read_u32()
        entries = []
        for _ in range(count):
            values = reader.read(self.fmt)
            entries.append(self.record_type(*values) if self.record_type else values[0])
        reader.expect_end()
        return entries

    def encode(self, value, version):
        parts = [struct.pack("<I", len(value))]
        for entry in value:
            fields = tuple(entry) if self.record_type else (entry,)
            parts.append(struct.pack(self.fmt, *fields))
        return b"".join(parts)

    def default(self):
        return [] if self.default_empty else None


class RepeatableStructListCodec(StructListCodec):
    """Struct list whose entries may be split across several chunks."""

    def merge(self, existing, value):
        return existing + value


class StructCodec(ChunkCodec):
    """Payload is exactly one fixed-layout record, without a count."""

    def __init__(self, tag: bytes, fmt: str, record_type=None):
        self.tag = tag
        self.fmt = fmt if fmt.startswith("<") else "<" + fmt
        self.record_type = record_type

    def decode(self, payload, version):
        reader = BinaryReader(payload, context=self.name)
        values = reader.read(self.fmt)
        reader.expect_end()
        return self.record_type(*values) if self.record_type else values[0]

    def encode(self, value, version):
        fields = tuple(value) if self.record_type else (value,)
        return struct.pack(self.fmt, *fields)

    def entry_count(self, value):
        return 1
