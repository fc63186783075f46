"""Tests for the wow-m2 command line tool."""
import os
import struct
import subprocess
import sys

import pytest

TOOLS_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, TOOLS_DIR)

from wow_m2.anim import AnimFile, AnimFormat
from wow_m2.chunks import M2Bone, M2Sequence, M2Vertex, RawChunk
from wow_m2.cli import main
from wow_m2.model import M2Header, M2Model
from wow_m2.skin import Skin, SkinFormat
from wow_m2.version import M2Version


def create_test_m2_file(path, version=M2Version.WOTLK, bone_index=0):
    chunks = {
        b"BONE": [M2Bone(parent_bone=-1)],
        b"VRTX": [M2Vertex(bone_indices=(bone_index, 0, 0, 0))],
        b"SEQS": [M2Sequence(id=0, duration=1000)],
        b"ZZZZ": RawChunk(b"ZZZZ", b"\x00" * 3),
    }
    if version >= M2Version.LEGION:
        chunks[b"SFID"] = [1]
    M2Model(M2Header(version, name="Boar"), chunks).save(path)
    return str(path)


def create_test_skin_file(path):
    vertex_data = struct.pack("<3H", 0, 1, 2)
    index_data = struct.pack("<3H", 0, 1, 2)
    submesh = struct.pack("<10H3f", 0, 0, 0, 3, 0, 3, 1, 0, 1, 0, 0.0, 0.0, 0.0)
    table = struct.pack("<7I", 3, 28, 3, 34, 1, 40, 21)
    path.write_bytes(table + vertex_data + index_data + submesh)
    return str(path)


def create_test_anim_file(path):
    bone = struct.pack("<HBBBB", 0, 1, 1, 1, 0)
    bone += struct.pack("<I", 1) + struct.pack("<I3f", 0, 0.0, 0.0, 0.0)
    bone += struct.pack("<I", 0) + struct.pack("<I", 0)
    section = struct.pack("<IIII", 0, 0, 1000, 1) + bone
    path.write_bytes(section)
    return str(path)


def test_cli_help():
    """CLI should show usage with --help."""
    result = subprocess.run(
        [sys.executable, "-m", "wow_m2.cli", "--help"],
        capture_output=True,
        text=True,
        cwd=TOOLS_DIR,
    )
    assert result.returncode == 0
    assert "usage" in result.stdout.lower()
    assert "anim-convert" in result.stdout


def test_cli_convert_subprocess(tmp_path):
    """CLI should convert a model when run as a module."""
    input_path = create_test_m2_file(tmp_path / "boar.m2")
    output_path = str(tmp_path / "boar_legion.m2")

    result = subprocess.run(
        [sys.executable, "-m", "wow_m2.cli", "convert", input_path, output_path, "--version", "legion"],
        capture_output=True,
        text=True,
        cwd=TOOLS_DIR,
    )

    assert result.returncode == 0, result.stderr
    assert M2Model.load(output_path).version is M2Version.LEGION


def test_info(tmp_path, capsys):
    """info should print header fields and chunk counts."""
    path = create_test_m2_file(tmp_path / "boar.m2")

    assert main(["info", path, "--detailed"]) == 0
    out = capsys.readouterr().out

    assert "Name: Boar" in out
    assert "Wrath of the Lich King" in out
    assert "VRTX: 1 entries" in out
    assert "ZZZZ: 3 bytes" in out


def test_validate_clean(tmp_path, capsys):
    """validate should succeed on a consistent model."""
    path = create_test_m2_file(tmp_path / "boar.m2")

    assert main(["validate", path, "--warnings"]) == 0
    out = capsys.readouterr().out
    assert "valid" in out
    assert "unknown chunk ZZZZ" in out


def test_validate_errors(tmp_path, capsys):
    """validate should report findings and fail."""
    path = create_test_m2_file(tmp_path / "boar.m2", bone_index=4)

    assert main(["validate", path]) == 1
    assert "Error: VRTX" in capsys.readouterr().out


def test_convert_prints_notes(tmp_path, capsys):
    """convert should list dropped chunks."""
    input_path = create_test_m2_file(tmp_path / "boar.m2", version=M2Version.LEGION)
    output_path = str(tmp_path / "boar_wotlk.m2")

    assert main(["convert", input_path, output_path, "--version", "3.3.5a"]) == 0
    out = capsys.readouterr().out

    assert "Dropped SFID" in out
    assert M2Model.load(output_path).version is M2Version.WOTLK


def test_convert_bad_version(tmp_path):
    """An unknown version name should be rejected by argument parsing."""
    path = create_test_m2_file(tmp_path / "boar.m2")
    with pytest.raises(SystemExit):
        main(["convert", path, str(tmp_path / "out.m2"), "--version", "nope"])


def test_missing_file_fails(tmp_path, capsys):
    """Commands should report I/O errors and fail."""
    assert main(["info", str(tmp_path / "missing.m2")]) == 1
    assert "Failed:" in capsys.readouterr().err


def test_corrupt_file_fails(tmp_path, capsys):
    """Commands should report parse errors and fail."""
    path = tmp_path / "bad.m2"
    path.write_bytes(b"NOPE" + b"\x00" * 40)
    assert main(["info", str(path)]) == 1
    assert "Invalid magic" in capsys.readouterr().err


def test_skin_info_old_format(tmp_path, capsys):
    """skin-info should read legacy skins and list submeshes."""
    path = create_test_skin_file(tmp_path / "boar00.skin")

    assert main(["skin-info", path, "--old-format", "--detailed"]) == 0
    out = capsys.readouterr().out

    assert "Format: legacy" in out
    assert "Submeshes: 1" in out
    assert "[0] id=0" in out


def test_skin_convert(tmp_path):
    """skin-convert should write the target version's layout."""
    input_path = create_test_skin_file(tmp_path / "boar00.skin")
    output_path = tmp_path / "boar00_wotlk.skin"

    assert main(["skin-convert", input_path, str(output_path), "--version", "wotlk"]) == 0
    assert Skin.load(output_path).format is SkinFormat.MODERN


def test_anim_info(tmp_path, capsys):
    """anim-info should show counts, memory use and structure hints."""
    path = create_test_anim_file(tmp_path / "boar0000-00.anim")

    assert main(["anim-info", path, "--detailed"]) == 0
    out = capsys.readouterr().out

    assert "Format: legacy" in out
    assert "Animations: 1" in out
    assert "appears valid=yes" in out
    assert "[0] 0-1000 ms" in out


def test_anim_convert(tmp_path):
    """anim-convert should transcode to the modern layout for Legion."""
    input_path = create_test_anim_file(tmp_path / "boar0000-00.anim")
    output_path = tmp_path / "boar_legion.anim"

    assert main(["anim-convert", input_path, str(output_path), "--version", "legion"]) == 0
    converted = AnimFile.load(output_path)
    assert converted.format is AnimFormat.MODERN
    assert converted.animation_count() == 1
