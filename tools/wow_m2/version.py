"""M2 format versions and the per-version chunk layout rules.

Each expansion release has its own header version number. The integer
values are unique so that a saved file always names exactly one layout,
and their order is the order of the releases.

Chunk rules (see ``CHUNK_RULES``):
- ``introduced``: first version in which the chunk may appear.
- ``required_since``/``required_before``: the half-open version range in
  which a model must carry the chunk.
- ``integrity``: the chunk cannot be dropped by a conversion.
- ``repeatable``: several occurrences are merged instead of rejected.
"""
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

from .errors import UnknownVersionError


class M2Version(IntEnum):
    """Model format version, valued by its on-disk header number."""

    CLASSIC = 256
    TBC = 263
    WOTLK = 264
    CATACLYSM = 265
    MOP = 272
    WOD = 273
    LEGION = 274
    BFA = 275
    SHADOWLANDS = 276
    DRAGONFLIGHT = 277
    THE_WAR_WITHIN = 278

    @classmethod
    def from_expansion_name(cls, name: str) -> "M2Version":
        """Resolve an expansion name or patch number ("WotLK", "3.3.5a")."""
        key = re.sub(r"[\s_\-']", "", name.strip().lower())
        if key in _ALIASES:
            return _ALIASES[key]

        match = re.match(r"^(\d+)(\.\d+)*[a-z]?$", key)
        if match:
            major = int(match.group(1))
            if major in _MAJOR_PATCHES:
                return _MAJOR_PATCHES[major]

        raise UnknownVersionError(name)

    @classmethod
    def from_header_version(cls, value: int) -> "M2Version":
        try:
            return cls(value)
        except ValueError:
            raise UnknownVersionError(value) from None

    @property
    def expansion_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def uses_modern_skin(self) -> bool:
        """External skins carry the chunk-tagged header from WotLK on."""
        return self >= M2Version.WOTLK

    @property
    def uses_modern_anim(self) -> bool:
        """ANIM files use the entry-table layout from Legion on."""
        return self >= M2Version.LEGION


_DISPLAY_NAMES = {
    M2Version.CLASSIC: "Classic",
    M2Version.TBC: "The Burning Crusade",
    M2Version.WOTLK: "Wrath of the Lich King",
    M2Version.CATACLYSM: "Cataclysm",
    M2Version.MOP: "Mists of Pandaria",
    M2Version.WOD: "Warlords of Draenor",
    M2Version.LEGION: "Legion",
    M2Version.BFA: "Battle for Azeroth",
    M2Version.SHADOWLANDS: "Shadowlands",
    M2Version.DRAGONFLIGHT: "Dragonflight",
    M2Version.THE_WAR_WITHIN: "The War Within",
}

_ALIASES = {
    "classic": M2Version.CLASSIC,
    "vanilla": M2Version.CLASSIC,
    "tbc": M2Version.TBC,
    "bc": M2Version.TBC,
    "burningcrusade": M2Version.TBC,
    "theburningcrusade": M2Version.TBC,
    "wotlk": M2Version.WOTLK,
    "wrath": M2Version.WOTLK,
    "wrathofthelichking": M2Version.WOTLK,
    "cata": M2Version.CATACLYSM,
    "cataclysm": M2Version.CATACLYSM,
    "mop": M2Version.MOP,
    "pandaria": M2Version.MOP,
    "mistsofpandaria": M2Version.MOP,
    "wod": M2Version.WOD,
    "warlords": M2Version.WOD,
    "warlordsofdraenor": M2Version.WOD,
    "legion": M2Version.LEGION,
    "bfa": M2Version.BFA,
    "battleforazeroth": M2Version.BFA,
    "sl": M2Version.SHADOWLANDS,
    "shadowlands": M2Version.SHADOWLANDS,
    "df": M2Version.DRAGONFLIGHT,
    "dragonflight": M2Version.DRAGONFLIGHT,
    "tww": M2Version.THE_WAR_WITHIN,
    "thewarwithin": M2Version.THE_WAR_WITHIN,
    "warwithin": M2Version.THE_WAR_WITHIN,
}
_ALIASES.update({member.name.lower().replace("_", ""): member for member in M2Version})

_MAJOR_PATCHES = {
    1: M2Version.CLASSIC,
    2: M2Version.TBC,
    3: M2Version.WOTLK,
    4: M2Version.CATACLYSM,
    5: M2Version.MOP,
    6: M2Version.WOD,
    7: M2Version.LEGION,
    8: M2Version.BFA,
    9: M2Version.SHADOWLANDS,
    10: M2Version.DRAGONFLIGHT,
    11: M2Version.THE_WAR_WITHIN,
}


@dataclass(frozen=True)
class ChunkRule:
    introduced: M2Version = M2Version.CLASSIC
    required_since: Optional[M2Version] = None
    required_before: Optional[M2Version] = None
    integrity: bool = False
    repeatable: bool = False


_CORE = ChunkRule()
_LEGION = ChunkRule(introduced=M2Version.LEGION)
_BFA = ChunkRule(introduced=M2Version.BFA)
_SHADOWLANDS = ChunkRule(introduced=M2Version.SHADOWLANDS)
_DRAGONFLIGHT = ChunkRule(introduced=M2Version.DRAGONFLIGHT)

CHUNK_RULES: Dict[bytes, ChunkRule] = {
    b"BONE": ChunkRule(required_since=M2Version.CLASSIC, required_before=M2Version.BFA),
    b"SKID": ChunkRule(introduced=M2Version.BFA, integrity=True),
    b"VRTX": ChunkRule(required_since=M2Version.CLASSIC, integrity=True),
    b"SEQS": ChunkRule(required_since=M2Version.CLASSIC, integrity=True),
    b"TEXS": _CORE,
    b"TXID": _LEGION,
    b"MATS": _CORE,
    b"TXAC": _LEGION,
    b"TXAN": _CORE,
    b"COLR": _CORE,
    b"TRNS": _CORE,
    b"ATCH": _CORE,
    b"EVTS": _CORE,
    b"LITE": _CORE,
    b"CAMS": _CORE,
    b"PRTE": _CORE,
    b"EXP2": _LEGION,
    b"PGD1": _BFA,
    b"GPID": _SHADOWLANDS,
    b"RPID": _SHADOWLANDS,
    b"RIBB": _CORE,
    b"PHYS": ChunkRule(introduced=M2Version.MOP),
    b"SFID": ChunkRule(introduced=M2Version.LEGION, required_since=M2Version.LEGION),
    b"AFID": ChunkRule(introduced=M2Version.LEGION, repeatable=True),
    b"BFID": _LEGION,
    b"PFID": _LEGION,
    b"LDV1": _BFA,
    b"PABC": _LEGION,
    b"PSBC": _LEGION,
    b"PEDC": _LEGION,
    b"WFV1": _BFA,
    b"EDGF": _BFA,
    b"NERF": _BFA,
    b"DETL": _BFA,
    b"DBOC": _DRAGONFLIGHT,
    b"AFRA": _DRAGONFLIGHT,
    b"DPIV": _DRAGONFLIGHT,
}

# Dependency order: chunks that others reference by index come first.
# This is also the on-disk order of known chunks.
CHUNK_ORDER = tuple(CHUNK_RULES)


def is_known_chunk(tag: bytes) -> bool:
    return tag in CHUNK_RULES


def is_chunk_legal(tag: bytes, version: M2Version) -> bool:
    """Unknown tags are opaque and legal everywhere."""
    rule = CHUNK_RULES.get(tag)
    return rule is None or version >= rule.introduced


def is_chunk_required(tag: bytes, version: M2Version) -> bool:
    rule = CHUNK_RULES.get(tag)
    if rule is None or rule.required_since is None:
        return False
    if version < rule.required_since:
        return False
    return rule.required_before is None or version < rule.required_before


def is_integrity_chunk(tag: bytes) -> bool:
    rule = CHUNK_RULES.get(tag)
    return rule is not None and rule.integrity


def is_repeatable_chunk(tag: bytes) -> bool:
    rule = CHUNK_RULES.get(tag)
    return rule is not None and rule.repeatable


def layout_order(version: M2Version, tags: Iterable[bytes]) -> List[bytes]:
    """Order ``tags`` the way ``version`` lays chunks out on disk.

    Known chunks follow ``CHUNK_ORDER``; unknown chunks keep their
    relative order and go last.
    """
    tags = list(tags)
    present = set(tags)
    known = [tag for tag in CHUNK_ORDER if tag in present and is_chunk_legal(tag, version)]
    unknown = [tag for tag in tags if not is_known_chunk(tag)]
    return known + unknown
