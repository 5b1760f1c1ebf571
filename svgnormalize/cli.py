"""
Command line entry point.

Reads SVG from a file or stdin, writes the normalized SVG to stdout or a
file. Diagnostics go to stderr.
"""

import argparse
import json
import logging
import sys

from .process import ProcessingConfig, process

log = logging.getLogger('svgnormalize')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='svgnormalize',
        description='Crop an SVG to its content and move its viewBox to (0, 0).',
    )
    parser.add_argument('input', nargs='?', help='SVG file to read (default: stdin)')
    parser.add_argument('-o', '--output', help='file to write (default: stdout)')
    parser.add_argument('--no-preprocess', dest='preprocess_shapes', action='store_false',
                        help='do not convert shapes to paths or bake transforms')
    parser.add_argument('--no-crop', dest='crop_whitespace', action='store_false',
                        help='keep the declared viewBox instead of cropping to content')
    parser.add_argument('--no-normalize-coordinates', dest='normalize_coordinates', action='store_false',
                        help='do not move geometry to the origin')
    parser.add_argument('--no-normalize-viewport', dest='normalize_viewport', action='store_false',
                        help='do not rewrite the viewBox or strip width/height')
    parser.add_argument('--no-optimize', dest='optimize', action='store_false',
                        help='skip the size optimization pass')
    parser.add_argument('--minify', action='store_true', help='remove whitespace between tags')
    parser.add_argument('--report', action='store_true', help='print the processing report as JSON to stderr')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug output')
    return parser


def config_from_args(args):
    return ProcessingConfig(
        preprocess_shapes=args.preprocess_shapes,
        crop_whitespace=args.crop_whitespace,
        normalize_coordinates=args.normalize_coordinates,
        normalize_viewport=args.normalize_viewport,
        optimize=args.optimize,
        minify=args.minify,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[svgnormalize] %(message)s',
    )

    if args.input:
        with open(args.input, encoding='utf-8') as f:
            svg_input = f.read()
    else:
        svg_input = sys.stdin.read()

    report = process(svg_input, config_from_args(args))

    if args.report:
        print(json.dumps(report.to_dict(), indent=2), file=sys.stderr)

    if not report.succeeded:
        for error in report.errors:
            log.error("ERROR: %s", error)
        return 1

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(report.output_document)
    else:
        print(report.output_document, end='')
    return 0


if __name__ == '__main__':
    sys.exit(main())
