#!/usr/bin/env python3
"""Inspect, validate and convert WoW M2 models, skins and ANIM files.

Usage:
    wow-m2 info <model.m2> [--detailed]
    wow-m2 validate <model.m2> [--warnings]
    wow-m2 convert <input.m2> <output.m2> --version <target>
    wow-m2 skin-info <model.skin> [--detailed] [--old-format]
    wow-m2 skin-convert <input.skin> <output.skin> --version <target>
    wow-m2 anim-info <file.anim> [--detailed]
    wow-m2 anim-convert <input.anim> <output.anim> --version <target>

Examples:
    # Downgrade a Legion model to the Wrath layout
    wow-m2 convert creature.m2 creature_335.m2 --version 3.3.5a

    # Show every submesh of a pre-Wrath skin
    wow-m2 skin-info creature00.skin --old-format --detailed
"""
import argparse
import logging
import sys

from .anim import AnimFile
from .chunks import RawChunk
from .converter import M2Converter
from .errors import M2Error
from .model import M2Model
from .skin import Skin, SkinFormat
from .version import M2Version


def parse_version(value: str) -> M2Version:
    try:
        return M2Version.from_expansion_name(value)
    except M2Error as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def cmd_info(args) -> int:
    model = M2Model.load(args.input)
    header = model.header
    print(f"File: {args.input}")
    print(f"Name: {header.name or '(unnamed)'}")
    print(f"Version: {model.version.expansion_name} ({int(model.version)})")
    print(f"Global flags: 0x{header.global_flags:08x}")
    print(f"Bounding radius: {header.bounding_radius:.3f}")
    print(f"Chunks: {len(model.chunks)}")

    if args.detailed:
        for name, count in model.summary().items():
            raw = isinstance(model.get_chunk(name.encode("ascii")), RawChunk)
            unit = "bytes (unknown chunk)" if raw else "entries"
            print(f"  {name}: {count} {unit}")
    return 0


def cmd_validate(args) -> int:
    model = M2Model.load(args.input)
    errors = model.validate()

    if args.warnings:
        for tag, value in model.chunks.items():
            if isinstance(value, RawChunk):
                print(f"Warning: unknown chunk {tag.decode('ascii', errors='replace')} "
                      f"kept as {len(value.data)} raw bytes")

    if not errors:
        print(f"{args.input}: valid")
        return 0

    for error in errors:
        print(f"Error: {error}")
    print(f"{args.input}: {len(errors)} validation error(s)")
    return 1


def cmd_convert(args) -> int:
    model = M2Model.load(args.input)
    converter = M2Converter()
    result = converter.convert(model, args.version)
    result.save(args.output)

    for note in converter.notes:
        print(f"  {note}")
    print(f"Converted: {args.input} ({model.version.expansion_name}) -> "
          f"{args.output} ({args.version.expansion_name})")
    return 0


def cmd_skin_info(args) -> int:
    mode = SkinFormat.LEGACY if args.old_format else None
    skin = Skin.load(args.input, mode)
    print(f"File: {args.input}")
    print(f"Format: {skin.format.value}")
    print(f"Vertex indices: {len(skin.vertex_indices)}")
    print(f"Triangle indices: {len(skin.triangle_indices)} ({len(skin.triangle_indices) // 3} triangles)")
    print(f"Submeshes: {len(skin.submeshes)}")
    print(f"Max bones per draw: {skin.bone_count_max}")

    if args.detailed:
        for i, submesh in enumerate(skin.submeshes):
            print(f"  [{i}] id={submesh.submesh_id} level={submesh.level} "
                  f"vertices={submesh.vertex_start}+{submesh.vertex_count} "
                  f"indices={submesh.index_start}+{submesh.index_count} "
                  f"bones={submesh.bone_count}")

    for error in skin.validate():
        print(f"Error: {error}")
    return 0


def cmd_skin_convert(args) -> int:
    skin = Skin.load(args.input)
    skin.save(args.output, args.version)
    target = SkinFormat.for_version(args.version)
    print(f"Converted: {args.input} ({skin.format.value}) -> {args.output} ({target.value})")
    return 0


def cmd_anim_info(args) -> int:
    anim = AnimFile.load(args.input)
    usage = anim.memory_usage()
    print(f"File: {args.input}")
    print(f"Format: {anim.format.value}")
    print(f"Animations: {anim.animation_count()}")
    print(f"Bone tracks: {usage.bone_animations}")
    print(f"Keyframes: {usage.total_keyframes()} "
          f"(translation {usage.translation_keyframes}, rotation {usage.rotation_keyframes}, "
          f"scaling {usage.scaling_keyframes})")
    print(f"Approximate memory: {usage.approximate_bytes} bytes")

    hints = anim.structure_hints
    if hints is not None:
        print(f"Structure: {hints.estimated_blocks} blocks, "
              f"timestamps={'yes' if hints.has_timestamps else 'no'}, "
              f"appears valid={'yes' if hints.appears_valid else 'no'}")

    if args.detailed:
        for section in anim.sections:
            header = section.header
            print(f"  [{header.id}] {header.start}-{header.end} ms, "
                  f"{len(section.bone_animations)} bones, {section.keyframe_count} keyframes")
    return 0


def cmd_anim_convert(args) -> int:
    anim = AnimFile.load(args.input)
    converted = anim.convert(args.version)
    converted.save(args.output)
    print(f"Converted: {args.input} ({anim.format.value}) -> {args.output} ({converted.format.value})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wow-m2",
        description="Inspect and convert World of Warcraft M2 models, skins and ANIM files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log conversion notes and parse details",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("info", help="Show model header and chunk summary")
    p.add_argument("input", help="Input M2 file")
    p.add_argument("--detailed", action="store_true", help="List entry counts per chunk")
    p.set_defaults(func=cmd_info)

    p = sub.add_parser("validate", help="Check cross-chunk references")
    p.add_argument("input", help="Input M2 file")
    p.add_argument("--warnings", action="store_true", help="Also report unknown chunks")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("convert", help="Convert a model to another version")
    p.add_argument("input", help="Input M2 file")
    p.add_argument("output", help="Output M2 file")
    p.add_argument("--version", required=True, type=parse_version,
                   help="Target expansion name or patch (e.g. wotlk, 3.3.5a)")
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("skin-info", help="Show skin tables")
    p.add_argument("input", help="Input skin file")
    p.add_argument("--detailed", action="store_true", help="List every submesh")
    p.add_argument("--old-format", action="store_true", help="Force the pre-Wrath header layout")
    p.set_defaults(func=cmd_skin_info)

    p = sub.add_parser("skin-convert", help="Rewrite a skin in another version's layout")
    p.add_argument("input", help="Input skin file")
    p.add_argument("output", help="Output skin file")
    p.add_argument("--version", required=True, type=parse_version, help="Target expansion name or patch")
    p.set_defaults(func=cmd_skin_convert)

    p = sub.add_parser("anim-info", help="Show ANIM sections and memory use")
    p.add_argument("input", help="Input ANIM file")
    p.add_argument("--detailed", action="store_true", help="List every section")
    p.set_defaults(func=cmd_anim_info)

    p = sub.add_parser("anim-convert", help="Rewrite an ANIM file in another version's layout")
    p.add_argument("input", help="Input ANIM file")
    p.add_argument("output", help="Output ANIM file")
    p.add_argument("--version", required=True, type=parse_version, help="Target expansion name or patch")
    p.set_defaults(func=cmd_anim_convert)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (M2Error, OSError) as e:
        print(f"Failed: {args.input} - {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
