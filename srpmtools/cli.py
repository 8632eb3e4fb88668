#!/usr/bin/env python3
"""
srpmtools CLI - extract metadata from a source RPM and apply its patches.

Usage:
    srpmtools [OPTIONS] SRPM

    SRPM can be a path to a .src.rpm file, a file:// URL or an http(s):// URL.

Examples:
    srpmtools ./redis-6.2.5-1.fc34.src.rpm
    srpmtools --json https://kojipkgs.fedoraproject.org/packages/yasm/1.3.0/12.fc33/src/yasm-1.3.0-12.fc33.src.rpm
    srpmtools --output-dir /var/tmp/srpm --nocleanup file:///tmp/rizin-0.2.0-2.fc33.src.rpm
"""

import argparse
import configparser
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional

from srpmtools import __version__
from srpmtools.builder import SRPMPipeline
from srpmtools.exceptions import NoSourcesError, SrpmToolsError
from srpmtools.metadata import PackageMetadata
from srpmtools.runner import ToolConfig

logger = logging.getLogger(__name__)

CONFIG_SECTION = "srpmtools"
CONFIG_KEYS = ("output_dir", "rpmbuild", "rpmspec", "rpm2cpio", "cpio")


def default_config_paths() -> list[Path]:
    return [
        Path("/etc/srpmtools.conf"),
        Path.home() / ".config" / "srpmtools" / "config",
    ]


def load_config(paths: Optional[list[Path]] = None) -> dict[str, Optional[str]]:
    """Load output_dir and tool paths from the srpmtools config files."""
    out: dict[str, Optional[str]] = {key: None for key in CONFIG_KEYS}
    for path in paths if paths is not None else default_config_paths():
        if not path.exists():
            continue
        config = configparser.ConfigParser()
        try:
            config.read(path, encoding="utf-8")
        except (configparser.Error, OSError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            continue
        if not config.has_section(CONFIG_SECTION):
            continue
        section = config[CONFIG_SECTION]
        for key in CONFIG_KEYS:
            if section.get(key) and not out[key]:
                out[key] = os.path.expanduser(section[key].strip())
    return out


def tool_config_from(config: dict[str, Optional[str]]) -> ToolConfig:
    overrides = {
        key: value
        for key, value in config.items()
        if key in ("rpmbuild", "rpmspec", "rpm2cpio", "cpio") and value
    }
    return ToolConfig(**overrides)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging based on verbosity."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level, format="%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    )


def create_parser(config: Optional[dict[str, Optional[str]]] = None) -> argparse.ArgumentParser:
    """Create argument parser."""
    config = config if config is not None else load_config()
    default_output = config.get("output_dir") or str(Path(tempfile.gettempdir()) / "srpmtools")

    parser = argparse.ArgumentParser(
        prog="srpmtools",
        description="Extract metadata from a source RPM and apply its patches",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show sources, patches, licenses and bundled code of a local SRPM
  srpmtools ./redis-6.2.5-1.fc34.src.rpm

  # Download, report as JSON, skip rpmbuild -bp
  srpmtools --json --no-patches https://example.com/pkg-1.0-1.src.rpm

  # Keep SOURCES/SRPMS/BUILD around for inspection
  srpmtools --nocleanup --output-dir /var/tmp/srpm pkg-1.0-1.src.rpm
""",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress non-error output")

    parser.add_argument(
        "--output-dir",
        metavar="DIR",
        default=default_output,
        help="rpmbuild topdir for SOURCES, SRPMS and BUILD (default: %(default)s)",
    )

    parser.add_argument(
        "--nocleanup",
        action="store_true",
        help="Do not clean up the RPM directories at the end",
    )

    parser.add_argument(
        "--no-patches", action="store_true", help="Do not run rpmbuild -bp on the spec file"
    )

    parser.add_argument("--json", action="store_true", help="Print metadata as JSON")

    parser.add_argument(
        "srpm",
        help="Path, file:// URL or http(s):// URL of the .src.rpm",
    )

    return parser


def print_metadata(metadata: PackageMetadata) -> None:
    """Print a human-readable summary of the metadata."""
    try:
        source0 = metadata.get_source0()
    except NoSourcesError:
        source0 = "(none)"

    print(f"Source0: {source0}")
    print(f"Licenses: {', '.join(metadata.licenses)}")
    print(f"SpecLocation: {metadata.spec_path}")
    print(f"SRPMLocation: {metadata.srpm_dir}")
    print(f"SourcesLocation: {metadata.sources_dir}")
    print(f"OutLocation: {metadata.output_root}")
    print(f"BuildLocation: {metadata.build_dir}")

    for kind, tags in metadata.tags.items():
        print(f"\n{kind} ({len(tags)}):")
        for tag in tags:
            print(f"  {tag}")

    if metadata.bundled:
        print(f"\nBundled ({len(metadata.bundled)}):")
        for dep in metadata.bundled:
            print(f"  {dep}")


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point."""
    config = load_config()
    parser = create_parser(config)
    opts = parser.parse_args(args)

    setup_logging(opts.verbose, opts.quiet)

    tools = tool_config_from(config)
    missing = tools.missing()
    if missing:
        logger.error(f"Required tools not found in PATH: {', '.join(missing)}")
        return 1

    pipeline = SRPMPipeline(opts.output_dir, tools=tools)
    metadata = None
    exit_code = 0

    try:
        metadata = pipeline.from_url(opts.srpm)

        if opts.json:
            print(json.dumps(metadata.to_dict(), indent=2))
        else:
            print_metadata(metadata)

        if not opts.no_patches:
            pipeline.apply_patches(metadata)

    except SrpmToolsError as e:
        logger.error(f"{e}")
        exit_code = 1
    finally:
        if not opts.nocleanup:
            pipeline.cleanup(metadata)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
