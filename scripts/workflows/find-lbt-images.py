#!/usr/bin/env python3
"""
Find land-blocking test images for a CI workflow

Runs the prober and, when running under GitHub Actions, exports the found
tag as the `image_tag` step output for later steps. Accepts the same flags
as find-lbt-images; the tag is always printed as plain text.

Usage:
    python find-lbt-images.py
    python find-lbt-images.py --config=config/land-blocking.yaml --fetch
"""

import os
import sys
from pathlib import Path

# Import our prober package
sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from prober import cli
from prober.errors import ProbeError


def write_github_output(tag: str, output_path: str):
    """Append image_tag=<tag> to the GITHUB_OUTPUT file"""
    with open(output_path, 'a') as f:
        f.write(f"image_tag={tag}\n")


def find_tag(args):
    """Return the qualifying tag, or None if there is none"""
    prober = cli.prober_from_args(args)

    if args.check_tag is not None:
        if prober.check_tag(args.check_tag) is None:
            return None
        return args.check_tag

    result = prober.probe()
    if result is None:
        print(f"No revision in offsets 0..{prober.max_offset} has all images", file=sys.stderr)
        return None
    return result.tag


def main(argv=None):
    args = cli.build_parser().parse_args(argv)

    try:
        tag = find_tag(args)
    except (ProbeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if tag is None:
        return 1

    print(tag)

    github_output = os.environ.get('GITHUB_OUTPUT')
    if github_output:
        write_github_output(tag, github_output)
        print(f"Exported image_tag={tag}", file=sys.stderr)

    return 0


if __name__ == '__main__':
    sys.exit(main())
