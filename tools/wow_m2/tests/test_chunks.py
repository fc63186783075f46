"""Tests for the per-chunk codecs and their version transforms."""
import copy
import struct
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from wow_m2.chunks import (
    CODECS,
    AnimationFileId,
    AnimationTrack,
    InterpolationType,
    LodData,
    M2Attachment,
    M2BlendMode,
    M2Bone,
    M2Camera,
    M2ColorAnimation,
    M2Event,
    M2Light,
    M2Material,
    M2ParticleEmitter,
    M2PhysicsData,
    M2PhysicsJoint,
    M2PhysicsShape,
    M2RibbonEmitter,
    M2Sequence,
    M2Texture,
    M2TextureAnimation,
    M2TransparencyAnimation,
    M2Vertex,
    TrackKey,
    get_codec,
)
from wow_m2.chunks.rendering_enhancements import (
    AlphaData,
    AnimationFrameRange,
    DbocData,
    EdgeFade,
    ExtendedParticle,
    LightingDetail,
    ParentEvent,
    Pivot,
    SequenceBounds,
    TextureCombiner,
    Waterfall,
)
from wow_m2.errors import DuplicateChunkError, FieldOverflowError, ParseError, TruncatedError
from wow_m2.version import CHUNK_RULES, M2Version, is_chunk_legal


def track(*keys, interpolation=InterpolationType.LINEAR):
    return AnimationTrack(interpolation, [TrackKey(ts, value) for ts, value in keys])


SAMPLES = {
    b"BONE": [
        M2Bone(key_bone_id=0, flags=0x200, parent_bone=-1, bone_name_crc=0xDEADBEEF, pivot=(0.0, 0.0, 1.5)),
        M2Bone(key_bone_id=-1, parent_bone=0, pivot=(0.5, 0.0, 2.0)),
    ],
    b"SKID": 1234567,
    b"VRTX": [
        M2Vertex(position=(1.0, 2.0, 3.0), bone_weights=(128, 127, 0, 0), bone_indices=(0, 1, 0, 0)),
        M2Vertex(position=(-1.0, 0.5, 0.25), tex_coords=(0.5, 0.75)),
    ],
    b"SEQS": [
        M2Sequence(id=0, duration=1000, blend_time_in=150, blend_time_out=150, movement_speed=1.5),
        M2Sequence(id=4, duration=2500, flags=0x20, frequency=32767, replay_max=10,
                   bounds_min=(-1.0, -1.0, 0.0), bounds_max=(1.0, 1.0, 2.0), bounds_radius=2.5),
    ],
    b"TEXS": [M2Texture(0, 1, "Creature\\Wolf\\Wolf.blp"), M2Texture(11, 3, "")],
    b"TXID": [101, 102],
    b"MATS": [M2Material(0x04, M2BlendMode.ALPHA), M2Material(0, M2BlendMode.MOD2X)],
    b"TXAC": [TextureCombiner(1, 2), TextureCombiner(0, 0)],
    b"TXAN": [M2TextureAnimation(
        animation_type=1,
        translation=track((0, (0.0, 0.0, 0.0)), (1000, (1.0, 0.0, 0.0))),
        rotation=track((0, (0.0, 0.0, 0.0, 1.0))),
    )],
    b"COLR": [M2ColorAnimation(
        color=track((0, (1.0, 0.5, 0.25))),
        alpha=track((0, 1.0), (500, 0.0)),
    )],
    b"TRNS": [M2TransparencyAnimation(track((0, 1.0), (250, 0.5)))],
    b"ATCH": [M2Attachment(id=1, bone=0, position=(0.0, 0.5, 1.0)), M2Attachment(id=11, bone=1, animate_attached=0)],
    b"EVTS": [M2Event(b"$CSD", 7, 1, (0.0, 0.0, 0.5))],
    b"LITE": [M2Light(bone=0, position=(0.0, 0.0, 2.0), ambient_color=(1.0, 1.0, 1.0), attenuation_end=4.0)],
    b"CAMS": [M2Camera(camera_type=0, fov=0.75, far_clip=27.5, near_clip=0.25, position=(3.0, 0.0, 1.0))],
    b"PRTE": [M2ParticleEmitter(
        id=0, bone=1, texture=0, rows=2, columns=2, lifespan=1.5, gravity=-9.75,
        multi_texture_param0=(0.5, 1.0), multi_texture_param1=(2.0, 0.25),
    )],
    b"EXP2": [ExtendedParticle(0.5, 0.0, 1.0)],
    b"PGD1": [3],
    b"GPID": [555],
    b"RPID": [556, 557],
    b"RIBB": [M2RibbonEmitter(
        id=0, bone=1, texture_indices=[0, 1], material_indices=[1],
        edges_per_second=30.0, edge_lifetime=0.5, priority_plane=-2,
    )],
    b"PHYS": M2PhysicsData(
        shapes=[M2PhysicsShape(0, 0, (1.0, 1.0, 2.0), 0.5, 0.25, 1.0), M2PhysicsShape(1, 1)],
        joints=[M2PhysicsJoint(0, 1, 2, (0.0, 0.0, 1.0))],
    ),
    b"SFID": [200001, 200002],
    b"AFID": [AnimationFileId(0, 0, 300001), AnimationFileId(4, 1, 300002)],
    b"BFID": [400001],
    b"PFID": 500001,
    b"LDV1": LodData(0, 3, 1.5, 0, 1, 2, 3, 0),
    b"PABC": [0, 4],
    b"PSBC": [SequenceBounds(-1.0, -1.0, 0.0, 1.0, 1.0, 2.0, 2.5)] * 2,
    b"PEDC": [ParentEvent(b"$CSD", 1)],
    b"WFV1": Waterfall(2, 0.5, 0.0, 1.0, 0.0),
    b"EDGF": [EdgeFade(0.0, 1.0, 0.5)],
    b"NERF": AlphaData(0.25, 0.75),
    b"DETL": [LightingDetail(1, 0, 1.5)],
    b"DBOC": DbocData(0.5, 1.0, 2, 3),
    b"AFRA": [AnimationFrameRange(4, 0, 120)],
    b"DPIV": [Pivot(0.0, 0.0, 1.0)],
}


def test_every_chunk_has_a_codec_and_sample():
    """Every ruled chunk tag should have a codec."""
    assert set(CODECS) == set(CHUNK_RULES)
    assert set(SAMPLES) == set(CODECS)


def test_get_codec_unknown_tag():
    """Unknown tags should have no codec."""
    assert get_codec(b"ZZZZ") is None
    assert get_codec(b"VRTX").name == "VRTX"


@pytest.mark.parametrize("tag", sorted(SAMPLES))
def test_codec_round_trip_at_every_legal_version(tag):
    """Should decode what it encodes at every version that allows the chunk."""
    codec = get_codec(tag)
    for version in M2Version:
        if not is_chunk_legal(tag, version):
            continue
        value = codec.transform(copy.deepcopy(SAMPLES[tag]), M2Version.THE_WAR_WITHIN, version)
        payload = codec.encode(value, version)
        assert codec.decode(payload, version) == value, f"{tag!r} at {version.name}"


def test_trailing_bytes_in_chunk_rejected():
    """Should raise ParseError when a payload has bytes past its records."""
    codec = get_codec(b"TXID")
    payload = codec.encode([1], M2Version.LEGION) + b"\x00"
    with pytest.raises(ParseError):
        codec.decode(payload, M2Version.LEGION)


def test_short_payload_is_truncated():
    """Should raise TruncatedError when the count promises more records."""
    codec = get_codec(b"SFID")
    with pytest.raises(TruncatedError):
        codec.decode(struct.pack("<II", 3, 1), M2Version.LEGION)


def test_bone_record_size_by_version():
    """Classic bones have no name CRC; TBC and later carry one."""
    codec = get_codec(b"BONE")
    bones = [M2Bone(bone_name_crc=7)]
    assert len(codec.encode(bones, M2Version.CLASSIC)) == 4 + 24
    assert len(codec.encode(bones, M2Version.TBC)) == 4 + 28


def test_bone_crc_cleared_below_tbc():
    """Converting bones to Classic should drop the name CRC."""
    codec = get_codec(b"BONE")
    bones = codec.transform([M2Bone(bone_name_crc=7)], M2Version.WOTLK, M2Version.CLASSIC)
    assert bones[0].bone_name_crc == 0


def create_classic_sequence(seq_id, start, end):
    """Build a pre-WotLK SEQS record with an explicit timeline slice."""
    return (
        struct.pack("<HH", seq_id, 0)
        + struct.pack("<II", start, end)
        + struct.pack("<fIhHII", 0.0, 0, 0, 0, 0, 0)
        + struct.pack("<I", 150)
        + struct.pack("<7f", *([0.0] * 7))
        + struct.pack("<hH", -1, 0)
    )


def test_sequence_global_timeline_decode():
    """Classic sequences should decode start and duration from the timeline slice."""
    payload = struct.pack("<I", 2) + create_classic_sequence(0, 0, 1000) + create_classic_sequence(1, 1000, 3333)
    sequences = get_codec(b"SEQS").decode(payload, M2Version.CLASSIC)

    assert sequences[1].start_timestamp == 1000
    assert sequences[1].duration == 2333
    assert sequences[1].end_timestamp == 3333
    assert sequences[0].blend_time_in == sequences[0].blend_time_out == 150


def test_sequence_ending_before_start_rejected():
    """Should raise ParseError for a timeline slice that runs backwards."""
    payload = struct.pack("<I", 1) + create_classic_sequence(0, 500, 100)
    with pytest.raises(ParseError):
        get_codec(b"SEQS").decode(payload, M2Version.CLASSIC)


def test_sequence_timeline_rebuilt_for_classic():
    """Converting to a global timeline should lay sequences end to end."""
    sequences = [M2Sequence(id=0, duration=1000), M2Sequence(id=1, duration=500), M2Sequence(id=2, duration=250)]
    result = get_codec(b"SEQS").transform(sequences, M2Version.WOTLK, M2Version.CLASSIC)
    assert [s.start_timestamp for s in result] == [0, 1000, 1500]
    assert [s.duration for s in result] == [1000, 500, 250]


def test_sequence_timeline_dropped_for_wotlk():
    """Converting away from a global timeline should zero start timestamps."""
    sequences = [M2Sequence(id=0, start_timestamp=1000, duration=500)]
    result = get_codec(b"SEQS").transform(sequences, M2Version.TBC, M2Version.WOTLK)
    assert result[0].start_timestamp == 0
    assert result[0].duration == 500


def test_sequence_blend_time_overflow():
    """A blend time that does not fit u16 should fail going to Legion."""
    sequences = [M2Sequence(id=3, duration=1000, blend_time_in=70000, blend_time_out=70000)]
    with pytest.raises(FieldOverflowError) as excinfo:
        get_codec(b"SEQS").transform(sequences, M2Version.WOD, M2Version.LEGION)
    assert "blend_time_in" in excinfo.value.field


def test_sequence_blend_time_merged_below_legion():
    """Split blend times should collapse to their maximum below Legion."""
    sequences = [M2Sequence(id=0, blend_time_in=100, blend_time_out=300)]
    result = get_codec(b"SEQS").transform(sequences, M2Version.LEGION, M2Version.WOD)
    assert result[0].blend_time_in == result[0].blend_time_out == 300


def test_material_blend_mode_overflow():
    """BLEND_ADD does not exist before WotLK."""
    materials = [M2Material(0, M2BlendMode.BLEND_ADD)]
    codec = get_codec(b"MATS")
    assert codec.transform(materials, M2Version.CATACLYSM, M2Version.WOTLK) == materials
    with pytest.raises(FieldOverflowError):
        codec.transform(materials, M2Version.CATACLYSM, M2Version.TBC)


def test_transparency_fixed16_decode():
    """Pre-Cataclysm alpha keys should decode from fixed16."""
    payload = (
        struct.pack("<I", 1)
        + struct.pack("<HHI", 1, 0, 2)
        + struct.pack("<Ih", 0, 32767)
        + struct.pack("<Ih", 100, 0)
    )
    entries = get_codec(b"TRNS").decode(payload, M2Version.WOTLK)
    assert [k.value for k in entries[0].alpha.keys] == [1.0, 0.0]


def test_transparency_float_decode():
    """Cataclysm alpha keys should decode as f32."""
    payload = struct.pack("<I", 1) + struct.pack("<HHI", 1, 0, 1) + struct.pack("<If", 0, 0.5)
    entries = get_codec(b"TRNS").decode(payload, M2Version.CATACLYSM)
    assert entries[0].alpha.keys[0].value == 0.5


def test_transparency_out_of_range_overflows():
    """An alpha that quantises outside i16 cannot be stored as fixed16."""
    entries = [M2TransparencyAnimation(track((0, 1.5)))]
    with pytest.raises(FieldOverflowError):
        get_codec(b"TRNS").transform(entries, M2Version.CATACLYSM, M2Version.WOTLK)


def test_transparency_quantised_when_narrowed():
    """Narrowing should quantise so the result encodes losslessly."""
    codec = get_codec(b"TRNS")
    entries = codec.transform([M2TransparencyAnimation(track((0, 0.3)))], M2Version.CATACLYSM, M2Version.WOTLK)
    value = entries[0].alpha.keys[0].value
    assert value == pytest.approx(0.3, abs=1e-4)
    assert codec.decode(codec.encode(entries, M2Version.WOTLK), M2Version.WOTLK) == entries


def test_transparency_most_negative_fixed16_round_trips():
    """An i16 of -32768 read from a WotLK file should write back unchanged."""
    codec = get_codec(b"TRNS")
    payload = struct.pack("<I", 1) + struct.pack("<HHI", 1, 0, 1) + struct.pack("<Ih", 0, -32768)
    entries = codec.decode(payload, M2Version.WOTLK)
    assert entries[0].alpha.keys[0].value < -1.0
    assert codec.encode(entries, M2Version.WOTLK) == payload
    assert codec.transform(entries, M2Version.WOTLK, M2Version.WOTLK) == entries


def test_color_alpha_most_negative_fixed16_round_trips():
    """COLR alpha keys of -32768 should survive decode and encode."""
    codec = get_codec(b"COLR")
    payload = (
        struct.pack("<I", 1)
        + struct.pack("<HHI", 1, 0, 1) + struct.pack("<I3f", 0, 1.0, 0.5, 0.25)
        + struct.pack("<HHI", 1, 0, 1) + struct.pack("<Ih", 0, -32768)
    )
    assert codec.encode(codec.decode(payload, M2Version.LEGION), M2Version.LEGION) == payload


@pytest.mark.parametrize("tag,payload", [
    (b"ATCH", struct.pack("<I", 1) + struct.pack("<IHH3fB", 5, 0, 0, 0.0, 0.0, 1.0, 2)),
    (b"LITE", struct.pack("<I", 1) + struct.pack(
        "<Hh3f3ff3ffffB", 1, -1, 0.0, 0.0, 2.0, 1.0, 1.0, 1.0, 0.5, 1.0, 1.0, 1.0, 0.5, 1.0, 4.0, 2)),
])
def test_u8_flags_keep_raw_value(tag, payload):
    """Flag bytes other than 0 or 1 should be written back as read."""
    codec = get_codec(tag)
    assert codec.encode(codec.decode(payload, M2Version.WOTLK), M2Version.WOTLK) == payload


def test_particle_multi_texture_by_version():
    """Multi-texture parameters exist from Cataclysm and reset below it."""
    codec = get_codec(b"PRTE")
    emitters = [M2ParticleEmitter(multi_texture_param0=(0.5, 1.0))]
    wotlk_size = len(codec.encode(emitters, M2Version.WOTLK))
    assert len(codec.encode(emitters, M2Version.CATACLYSM)) == wotlk_size + 16

    result = codec.transform(emitters, M2Version.CATACLYSM, M2Version.WOTLK)
    assert result[0].multi_texture_param0 == (0.0, 0.0)


def test_ribbon_priority_plane_by_version():
    """Priority plane exists from WotLK and resets below it."""
    codec = get_codec(b"RIBB")
    ribbons = [M2RibbonEmitter(priority_plane=3)]
    assert len(codec.encode(ribbons, M2Version.WOTLK)) == len(codec.encode(ribbons, M2Version.TBC)) + 4
    assert codec.transform(ribbons, M2Version.WOTLK, M2Version.TBC)[0].priority_plane == 0


def test_color_alpha_range_checked_on_encode():
    """COLR alpha is fixed16 in every version."""
    entries = [M2ColorAnimation(alpha=track((0, 2.0)))]
    with pytest.raises(FieldOverflowError):
        get_codec(b"COLR").encode(entries, M2Version.LEGION)


def test_repeatable_chunk_merges():
    """AFID occurrences should concatenate."""
    codec = get_codec(b"AFID")
    merged = codec.merge([AnimationFileId(0, 0, 1)], [AnimationFileId(1, 0, 2)])
    assert [entry.file_id for entry in merged] == [1, 2]


def test_non_repeatable_chunk_merge_rejected():
    """Merging a non-repeatable chunk should raise DuplicateChunkError."""
    with pytest.raises(DuplicateChunkError):
        get_codec(b"SFID").merge([1], [2])


def test_defaults():
    """Only chunks with a safe empty value should provide a default."""
    assert get_codec(b"SFID").default() == []
    assert get_codec(b"VRTX").default() is None
    assert get_codec(b"SEQS").default() is None
    assert get_codec(b"BONE").default() is None


def test_entry_counts():
    """Entry counts should count list records, physics shapes and single records."""
    assert get_codec(b"VRTX").entry_count(SAMPLES[b"VRTX"]) == 2
    assert get_codec(b"PHYS").entry_count(SAMPLES[b"PHYS"]) == 2
    assert get_codec(b"PFID").entry_count(SAMPLES[b"PFID"]) == 1


def test_vertex_influences():
    """Should list only bones with a non-zero weight."""
    vertex = M2Vertex(bone_weights=(200, 55, 0, 0), bone_indices=(3, 1, 9, 9))
    assert vertex.influences() == [(3, 200), (1, 55)]
