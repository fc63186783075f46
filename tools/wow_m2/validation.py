"""Cross-chunk consistency checks for decoded models.

Validation never raises and never mutates: it returns every finding so
the caller can decide which ones matter.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping

# Chunks that must hold exactly one entry per entry of another chunk.
COUNT_LINKS = (
    (b"TXID", b"TEXS"),
    (b"PSBC", b"SEQS"),
    (b"TXAC", b"MATS"),
    (b"EXP2", b"PRTE"),
    (b"PGD1", b"PRTE"),
    (b"GPID", b"PRTE"),
)


class ValidationErrorKind(Enum):
    DANGLING_REFERENCE = "dangling_reference"
    COUNT_MISMATCH = "count_mismatch"
    OUT_OF_BOUNDS_INDEX = "out_of_bounds_index"


@dataclass(frozen=True)
class ValidationError:
    kind: ValidationErrorKind
    chunk: bytes
    message: str

    def __str__(self) -> str:
        return f"{self.chunk.decode('ascii', errors='replace')}: {self.message}"


def _name(tag: bytes) -> str:
    return tag.decode("ascii", errors="replace")


class ModelValidator:
    """Collects validation findings for one set of decoded chunks."""

    def __init__(self, chunks: Mapping[bytes, Any]):
        self.chunks = chunks
        self.errors: List[ValidationError] = []
        # Bones may live in an external skeleton file.
        self.external_skeleton = b"SKID" in chunks

    def add(self, kind: ValidationErrorKind, chunk: bytes, message: str):
        self.errors.append(ValidationError(kind, chunk, message))

    def check_index(self, chunk: bytes, what: str, index: int, target: bytes,
                    allow_none: bool = False):
        """Check that ``index`` addresses an entry of chunk ``target``.

        With ``allow_none``, -1 means "no reference".
        """
        if allow_none and index == -1:
            return

        entries = self.chunks.get(target)
        if entries is None:
            if target == b"BONE" and self.external_skeleton:
                return
            self.add(
                ValidationErrorKind.DANGLING_REFERENCE, chunk,
                f"{what} references {_name(target)} {index} but the model has no {_name(target)} chunk",
            )
        elif not 0 <= index < len(entries):
            self.add(
                ValidationErrorKind.OUT_OF_BOUNDS_INDEX, chunk,
                f"{what} references {_name(target)} {index}, only {len(entries)} present",
            )

    def run(self) -> List[ValidationError]:
        chunks = self.chunks

        for i, bone in enumerate(chunks.get(b"BONE", [])):
            self.check_index(b"BONE", f"bone {i} parent", bone.parent_bone, b"BONE", allow_none=True)

        for i, vertex in enumerate(chunks.get(b"VRTX", [])):
            for bone_index, _weight in vertex.influences():
                self.check_index(b"VRTX", f"vertex {i}", bone_index, b"BONE")

        for i, attachment in enumerate(chunks.get(b"ATCH", [])):
            self.check_index(b"ATCH", f"attachment {i}", attachment.bone, b"BONE")

        for i, event in enumerate(chunks.get(b"EVTS", [])):
            self.check_index(b"EVTS", f"event {i}", event.bone, b"BONE")

        for i, light in enumerate(chunks.get(b"LITE", [])):
            self.check_index(b"LITE", f"light {i}", light.bone, b"BONE", allow_none=True)

        for i, emitter in enumerate(chunks.get(b"PRTE", [])):
            self.check_index(b"PRTE", f"particle emitter {i}", emitter.bone, b"BONE")
            self.check_index(b"PRTE", f"particle emitter {i}", emitter.texture, b"TEXS")

        for i, ribbon in enumerate(chunks.get(b"RIBB", [])):
            self.check_index(b"RIBB", f"ribbon {i}", ribbon.bone, b"BONE")
            for texture in ribbon.texture_indices:
                self.check_index(b"RIBB", f"ribbon {i}", texture, b"TEXS")
            for material in ribbon.material_indices:
                self.check_index(b"RIBB", f"ribbon {i}", material, b"MATS")

        physics = chunks.get(b"PHYS")
        if physics is not None:
            self._check_physics(physics)

        self._check_sequences()
        self._check_counts()
        return self.errors

    def _check_physics(self, physics):
        for i, shape in enumerate(physics.shapes):
            self.check_index(b"PHYS", f"physics shape {i}", shape.bone, b"BONE", allow_none=True)
        for i, joint in enumerate(physics.joints):
            for body in (joint.body_a, joint.body_b):
                if not 0 <= body < len(physics.shapes):
                    self.add(
                        ValidationErrorKind.OUT_OF_BOUNDS_INDEX, b"PHYS",
                        f"joint {i} references shape {body}, only {len(physics.shapes)} present",
                    )

    def _check_sequences(self):
        sequences = self.chunks.get(b"SEQS", [])
        for i, seq in enumerate(sequences):
            self.check_index(b"SEQS", f"sequence {i} variation_next", seq.variation_next, b"SEQS", allow_none=True)
            self.check_index(b"SEQS", f"sequence {i} alias_next", seq.alias_next, b"SEQS")

        known_ids = {seq.id for seq in sequences}
        for entry in self.chunks.get(b"AFID", []):
            if entry.anim_id not in known_ids:
                self.add(
                    ValidationErrorKind.DANGLING_REFERENCE, b"AFID",
                    f"animation file {entry.file_id} names unknown sequence id {entry.anim_id}",
                )

    def _check_counts(self):
        for tag, owner in COUNT_LINKS:
            entries = self.chunks.get(tag)
            if entries is None:
                continue
            expected = len(self.chunks.get(owner, []))
            if len(entries) != expected:
                self.add(
                    ValidationErrorKind.COUNT_MISMATCH, tag,
                    f"{len(entries)} entries, {_name(owner)} has {expected}",
                )


def validate_chunks(chunks: Mapping[bytes, Any]) -> List[ValidationError]:
    return ModelValidator(chunks).run()
