"""Conversion of decoded models between format versions.

Chunks are processed in ``CHUNK_ORDER``, so chunks that others reference
by index (bones, textures, sequences) are settled before their users.
Conversion is all-or-nothing: the source model is never modified, and
any error leaves the caller with exactly what it passed in.
"""
import copy
import logging
from dataclasses import replace
from typing import Dict, List

from .chunks import get_codec
from .errors import (
    CannotDropRequiredChunkError,
    MissingRequiredChunkError,
    PostConversionValidationFailedError,
)
from .model import M2Model
from .version import (
    CHUNK_ORDER,
    M2Version,
    is_chunk_legal,
    is_chunk_required,
    is_integrity_chunk,
    is_known_chunk,
)

logger = logging.getLogger(__name__)


class M2Converter:
    """Converts models to another version's layout rules.

    After each ``convert`` call, ``notes`` lists what the conversion did
    beyond plain re-encoding: dropped chunks, synthesised defaults.
    """

    def __init__(self):
        self.notes: List[str] = []

    def _note(self, message: str):
        self.notes.append(message)
        logger.info(message)

    def convert(self, model: M2Model, target: M2Version) -> M2Model:
        """Return a new model laid out for ``target``.

        Raises:
            CannotDropRequiredChunkError: Target forbids an integrity chunk
            MissingRequiredChunkError: Target requires a chunk with no safe default
            FieldOverflowError: A value does not fit the target's encoding
            PostConversionValidationFailedError: Result is inconsistent
        """
        self.notes = []
        source = model.version
        logger.debug("Converting %s from %s to %s", model.header.name, source.name, target.name)

        converted: Dict[bytes, object] = {}
        for tag in CHUNK_ORDER:
            name = tag.decode("ascii")
            codec = get_codec(tag)

            if tag not in model.chunks:
                if is_chunk_required(tag, target):
                    default = codec.default()
                    if default is None:
                        raise MissingRequiredChunkError(tag, target)
                    converted[tag] = default
                    self._note(f"Added empty {name} chunk required by {target.expansion_name}")
                continue

            if not is_chunk_legal(tag, target):
                if is_integrity_chunk(tag):
                    raise CannotDropRequiredChunkError(tag, target)
                self._note(f"Dropped {name} chunk: not supported by {target.expansion_name}")
                continue

            value = copy.deepcopy(model.chunks[tag])
            converted[tag] = codec.transform(value, source, target)

        for tag, value in model.chunks.items():
            if not is_known_chunk(tag):
                converted[tag] = copy.deepcopy(value)

        # Keep the source's first-seen order for chunks that survived.
        ordered = {tag: converted[tag] for tag in model.chunks if tag in converted}
        ordered.update((tag, value) for tag, value in converted.items() if tag not in ordered)

        result = M2Model(replace(copy.deepcopy(model.header), version=target), ordered)

        errors = result.validate()
        if errors:
            raise PostConversionValidationFailedError(errors)

        if source != target:
            logger.info("Converted %s from %s to %s", model.header.name or "model",
                        source.expansion_name, target.expansion_name)
        return result
