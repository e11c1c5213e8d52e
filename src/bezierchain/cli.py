"""
Command-line interface for bezierchain.

Decodes, encodes, inspects, hit-tests, samples and edits share strings outside
the browser.
"""

import argparse
import json
import os
import sys

from bezierchain.config import load_config, save_default_config
from bezierchain.tracer import configure_tracer, get_tracer

SHARE_HELP = "Share string, URL, '#fragment' or path to a text file holding one"


def _add_trace_args(parser):
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bezierchain",
        description="bezierchain: work with shareable cubic Bezier curve strings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    decode_parser = subparsers.add_parser("decode", help="Decode a share string to JSON")
    decode_parser.add_argument("share", help=SHARE_HELP)
    decode_parser.add_argument("--out", "-o", default=None, help="Write JSON to this file")
    _add_trace_args(decode_parser)

    encode_parser = subparsers.add_parser("encode", help="Encode a JSON collection as a share string")
    encode_parser.add_argument("json_path", help="Path to collection JSON")
    _add_trace_args(encode_parser)

    info_parser = subparsers.add_parser("info", help="Summarize the curves in a share string")
    info_parser.add_argument("share", help=SHARE_HELP)
    _add_trace_args(info_parser)

    hit_parser = subparsers.add_parser("hit", help="Find the anchor or curve under a point")
    hit_parser.add_argument("share", help=SHARE_HELP)
    hit_parser.add_argument("--x", type=float, required=True, help="Point x coordinate")
    hit_parser.add_argument("--y", type=float, required=True, help="Point y coordinate")
    _add_trace_args(hit_parser)

    sample_parser = subparsers.add_parser("sample", help="Export curves as JSON polylines for rendering")
    sample_parser.add_argument("share", help=SHARE_HELP)
    sample_parser.add_argument("--out", "-o", default=None, help="Write JSON to this file")
    _add_trace_args(sample_parser)

    ops_parser = subparsers.add_parser("ops", help="Operations subcommands")
    ops_subparsers = ops_parser.add_subparsers(dest="ops_command")

    apply_parser = ops_subparsers.add_parser("apply", help="Apply edit operations to a share string")
    apply_parser.add_argument("--share", required=True, help=SHARE_HELP)
    apply_parser.add_argument("--ops", required=True, help="Path to operations JSON file")
    apply_parser.add_argument("--out", "-o", default=None, help="Write the new share string to this file")
    _add_trace_args(apply_parser)

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="bezierchain_config.yaml",
        help="Output path for config file",
    )

    return parser, ops_parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser, ops_parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init-config":
        return handle_init_config(args)

    if args.command == "ops" and args.ops_command is None:
        ops_parser.print_help()
        return 0

    config = load_config(args.config)
    configure_tracer(
        enabled=args.trace or config.tracing.enabled,
        level=args.trace_level if args.trace else config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )

    handlers = {
        "decode": handle_decode,
        "encode": handle_encode,
        "info": handle_info,
        "hit": handle_hit,
        "sample": handle_sample,
        "ops": handle_ops_apply,
    }

    tracer = get_tracer()
    try:
        with tracer.span(f"cli_{args.command}", module="cli"):
            return handlers[args.command](args, config)
    except Exception as e:
        tracer.event(f"Command failed: {str(e)}", level="ERROR")
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()


def load_share_arg(value):
    """Parse a share argument, reading it from disk when it names a file."""
    from bezierchain.io.files import read_share_string
    from bezierchain.serialize.share_string import parse_url_fragment

    if os.path.isfile(value):
        return read_share_string(value)
    return parse_url_fragment(value)


def handle_decode(args, config):
    """Handle the decode command."""
    from bezierchain.io.files import save_json

    collection = load_share_arg(args.share)

    if args.out:
        save_json(collection, args.out)
        print(f"Decoded {len(collection.curves)} curves to: {args.out}")
    else:
        print(json.dumps(collection.model_dump(mode="json"), indent=2))

    return 0


def handle_encode(args, config):
    """Handle the encode command."""
    from bezierchain.io.files import load_collection
    from bezierchain.serialize.share_string import serialize_collection

    collection = load_collection(args.json_path)
    print(serialize_collection(collection))
    return 0


def handle_info(args, config):
    """Handle the info command."""
    from bezierchain.geometry.bezier import curve_bounding_box, curve_total_length
    from bezierchain.serialize.share_string import continuity_to_letter

    collection = load_share_arg(args.share)
    samples = config.geometry.length_samples

    print(f"Curves: {len(collection.curves)}")
    for i, curve in enumerate(collection.curves):
        bbox = curve_bounding_box(curve)
        bbox_str = ", ".join(f"{v:.1f}" for v in bbox.as_list()) if bbox else "-"
        junctions = "".join(continuity_to_letter(m) for m in curve.continuity) or "-"
        marker = "*" if i == collection.active_curve_index else " "
        print(f"{marker} [{i}] segments={len(curve.segments)} "
              f"length={curve_total_length(curve, samples):.1f} "
              f"bbox=[{bbox_str}] junctions={junctions}")

    return 0


def handle_hit(args, config):
    """Handle the hit command. Anchors take priority over curve bodies."""
    from bezierchain.geometry.bezier import find_anchor, hit_test_collection
    from bezierchain.models import Point

    collection = load_share_arg(args.share)
    point = Point(x=args.x, y=args.y)

    node = find_anchor(collection.curves, point, config.hit_test.anchor_radius)
    if node is not None:
        print(f"Anchor: curve={node.curve_index} segment={node.segment_index} role={node.role}")
        return 0

    hit = hit_test_collection(
        collection.curves,
        point,
        config.hit_test.tolerance,
        config.geometry.nearest_samples,
    )
    if hit is not None:
        print(f"Curve: curve={hit.curve_index} segment={hit.segment_index} "
              f"t={hit.t:.2f} distance={hit.distance:.1f}")
    else:
        print("No hit")

    return 0


def handle_sample(args, config):
    """Handle the sample command."""
    from bezierchain.geometry.bezier import sample_curve_polyline
    from bezierchain.io.files import save_json

    collection = load_share_arg(args.share)
    samples = config.geometry.render_samples

    data = {
        "samples_per_segment": samples,
        "curves": [
            [[p.x, p.y] for p in sample_curve_polyline(curve, samples)]
            for curve in collection.curves
        ],
    }

    if args.out:
        save_json(data, args.out)
        print(f"Sampled {len(data['curves'])} curves to: {args.out}")
    else:
        print(json.dumps(data))

    return 0


def handle_ops_apply(args, config):
    """Handle the ops apply command."""
    from bezierchain.edit.operations import apply_operations
    from bezierchain.io.files import load_json, write_text
    from bezierchain.serialize.share_string import serialize_collection

    collection = load_share_arg(args.share)
    operations = load_json(args.ops)

    collection = apply_operations(collection, operations)
    share = serialize_collection(collection)

    if args.out:
        write_text(share, args.out)
        print(f"Applied {len(operations)} operations, saved to: {args.out}")
    else:
        print(share)

    return 0


def handle_init_config(args):
    """Handle the init-config command."""
    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
