"""Exception types raised by the M2 format tools.

Parse errors are fatal to a load call. Conversion errors leave the source
model untouched. Validation findings are not exceptions; see
``validation.ValidationError``.
"""
from typing import List, Optional


class M2Error(Exception):
    """Base class for every error raised by this package."""


class ParseError(M2Error, ValueError):
    """Input bytes could not be decoded."""


class TruncatedError(ParseError):
    """Fewer bytes remain than a header or declared size requires."""

    def __init__(self, needed: int, available: int, context: str = ""):
        self.needed = needed
        self.available = available
        self.context = context
        where = f" while reading {context}" if context else ""
        super().__init__(
            f"Truncated data{where}: need {needed} bytes, {available} available"
        )


class InvalidMagicError(ParseError):
    """Leading magic bytes do not identify the expected file type."""

    def __init__(self, magic: bytes, expected: bytes):
        self.magic = magic
        self.expected = expected
        super().__init__(f"Invalid magic: {magic!r} (expected {expected!r})")


class UnknownVersionError(ParseError):
    """A header version number or expansion name is not recognised."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown version: {value!r}")


class IllegalChunkForVersionError(ParseError):
    """A chunk appears in a file whose version forbids it."""

    def __init__(self, tag: bytes, version):
        self.tag = tag
        self.version = version
        super().__init__(
            f"Chunk {tag.decode('ascii', errors='replace')} is not allowed "
            f"in {version.expansion_name} models"
        )


class DuplicateChunkError(ParseError):
    """A non-repeatable chunk tag appears more than once."""

    def __init__(self, tag: bytes):
        self.tag = tag
        super().__init__(
            f"Duplicate chunk: {tag.decode('ascii', errors='replace')}"
        )


class ConversionError(M2Error):
    """A model could not be converted to the requested version."""


class CannotDropRequiredChunkError(ConversionError):
    """The target forbids a chunk the model cannot lose."""

    def __init__(self, tag: bytes, version):
        self.tag = tag
        self.version = version
        super().__init__(
            f"Cannot drop {tag.decode('ascii', errors='replace')}: required for "
            f"model integrity but not allowed in {version.expansion_name}"
        )


class MissingRequiredChunkError(ConversionError):
    """The target requires a chunk that is absent and has no safe default."""

    def __init__(self, tag: bytes, version):
        self.tag = tag
        self.version = version
        super().__init__(
            f"{version.expansion_name} requires chunk "
            f"{tag.decode('ascii', errors='replace')}, which the model lacks"
        )


class FieldOverflowError(ConversionError):
    """A value does not fit the target version's field encoding."""

    def __init__(self, field: str, value, limit: Optional[str] = None):
        self.field = field
        self.value = value
        detail = f" ({limit})" if limit else ""
        super().__init__(f"Field {field} value {value!r} out of range{detail}")


class PostConversionValidationFailedError(ConversionError):
    """The converted model did not pass validation."""

    def __init__(self, errors: List):
        self.errors = list(errors)
        super().__init__(
            f"Converted model failed validation with {len(self.errors)} error(s): "
            + "; ".join(str(e) for e in self.errors[:5])
        )
