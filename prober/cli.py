#!/usr/bin/env python3
"""
Land-Blocking Image Finder - CLI

Finds the newest revision on the reference branch whose land-blocking test
images have all been pushed, and prints its image tag.
"""

import argparse
import json
import sys

from .config import BACKENDS, build_checker, build_revision_source, load_config
from .errors import ProbeError
from .prober import ON_ERROR_POLICIES, ImageAvailabilityProber


def _stderr(message: str):
    print(message, file=sys.stderr)


def apply_overrides(config, args):
    """Overlay command-line flags on the loaded config"""
    if args.repository:
        config.repositories = list(args.repository)
    if args.max_offset is not None:
        config.max_offset = args.max_offset
    if args.ref:
        config.ref = args.ref
    if args.tag_prefix is not None:
        config.tag_prefix = args.tag_prefix
    if args.short_length is not None:
        config.short_length = args.short_length
    if args.on_error:
        config.on_error = args.on_error
    if args.backend:
        config.backend = args.backend
    if args.region:
        config.region = args.region
    if args.registry_id:
        config.registry_id = args.registry_id
    if args.registry_url:
        config.registry_url = args.registry_url
    if args.namespace:
        config.namespace = args.namespace
    if args.repo_dir:
        config.repo_dir = args.repo_dir
    if args.fetch:
        config.fetch = True
    return config


def prober_from_args(args) -> ImageAvailabilityProber:
    """Load config, apply flags and build the prober they describe"""
    config = load_config(args.config).apply_env()
    config = apply_overrides(config, args).validate()
    return build_prober(config, verbose=not args.quiet)


def build_prober(config, verbose: bool = True) -> ImageAvailabilityProber:
    return ImageAvailabilityProber(
        revisions=build_revision_source(config, log=_stderr),
        checker=build_checker(config),
        repositories=config.repositories,
        max_offset=config.max_offset,
        tag_prefix=config.tag_prefix,
        short_length=config.short_length,
        on_error=config.on_error,
        log=_stderr,
        verbose=verbose,
    )


def check_tag_command(prober, tag, output_format):
    """Check a single tag across all repositories"""
    checks = prober.check_tag(tag)
    if checks is None:
        return 1

    if output_format == 'json':
        print(json.dumps({'tag': tag, 'repositories': [c.repository for c in checks]}, indent=2))
    else:
        print(tag)
    return 0


def find_command(prober, output_format):
    """Scan the revision window for the newest fully built revision"""
    result = prober.probe()
    if result is None:
        _stderr(f"No revision in offsets 0..{prober.max_offset} has all images")
        return 1

    if output_format == 'json':
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.tag)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Find the newest revision whose land-blocking images all exist'
    )
    parser.add_argument('--config', default=None,
                        help='Path to YAML config (default: config/land-blocking.yaml if present)')
    parser.add_argument('--repository', action='append', metavar='NAME',
                        help='Image repository that must carry the tag (repeatable)')
    parser.add_argument('--max-offset', type=int,
                        help='Last commit offset to check, inclusive (default: 50)')
    parser.add_argument('--ref', help='Reference whose history is scanned (default: origin/master)')
    parser.add_argument('--tag-prefix', help='Image tag prefix (default: land_)')
    parser.add_argument('--short-length', type=int,
                        help='Commit hash characters in the tag (default: 8)')
    parser.add_argument('--backend', choices=BACKENDS,
                        help='Registry backend (default: ecr)')
    parser.add_argument('--region', help='AWS region for ECR backends')
    parser.add_argument('--registry-id', help='AWS account id owning the ECR registry')
    parser.add_argument('--registry-url', help='Registry URL for the registry-v2 backend')
    parser.add_argument('--namespace', help='Repository namespace for the registry-v2 backend')
    parser.add_argument('--on-error', choices=ON_ERROR_POLICIES,
                        help='Stop on registry errors or skip the revision (default: fail)')
    parser.add_argument('--repo-dir', help='Git working tree (default: current directory)')
    parser.add_argument('--fetch', action='store_true',
                        help='Fetch the remote before resolving revisions')
    parser.add_argument('--check-tag', metavar='TAG',
                        help='Only check whether TAG exists in every repository')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress per-image progress lines')
    parser.add_argument('--output-format', choices=['text', 'json'], default='text',
                        help='Output format (default: text)')
    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        prober = prober_from_args(args)

        if args.check_tag is not None:
            return check_tag_command(prober, args.check_tag, args.output_format)
        return find_command(prober, args.output_format)

    except (ProbeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
