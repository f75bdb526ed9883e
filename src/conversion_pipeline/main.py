"""Main module for the conversion pipeline CLI."""

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Dict, List, Optional

from . import __version__
from .converters import get_tool, list_tools
from .core import (
    ArtifactStoreError,
    BatchOrchestrator,
    ConfigurationError,
    InputFile,
    ItemStatus,
    PipelineSettings,
    RemoteFetchError,
)
from .core.factories import PipelineFactory
from .core.validation import format_size_limit

# Types missing from the mimetypes tables on some platforms.
EXTRA_MEDIA_TYPES = {
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".json": "application/json",
    ".svg": "image/svg+xml",
}

EXIT_OK = 0
EXIT_FETCH_REJECTED = 1
EXIT_USAGE = 2
EXIT_CLEANUP_FAILED = 3


def guess_media_type(path: Path) -> str:
    """Declared type for a local file, from its extension ("" when unknown)."""
    suffix = path.suffix.lower()
    if suffix in EXTRA_MEDIA_TYPES:
        return EXTRA_MEDIA_TYPES[suffix]
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or ""


def read_input_files(paths: List[str]) -> List[InputFile]:
    files = []
    for raw in paths:
        path = Path(raw)
        files.append(
            InputFile(name=path.name, media_type=guess_media_type(path), data=path.read_bytes())
        )
    return files


def parse_options(pairs: List[str]) -> Dict[str, str]:
    """Parse repeated ``key=value`` flags into a mapping."""
    options: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError(f"Option '{pair}' must look like key=value")
        options[key.strip().replace("-", "_")] = value.strip()
    return options


def unique_path(directory: Path, name: str) -> Path:
    candidate = directory / name
    counter = 1
    while candidate.exists():
        stem, dot, ext = name.rpartition(".")
        candidate = directory / (f"{stem}-{counter}.{ext}" if dot else f"{name}-{counter}")
        counter += 1
    return candidate


def write_outputs(pipeline: BatchOrchestrator, output_dir: Path) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for item in pipeline.snapshot():
        if item.status is ItemStatus.DONE and item.artifact is not None:
            target = unique_path(output_dir, item.artifact.name)
            target.write_bytes(pipeline.store.read(item.artifact))
            written.append(target)
    return written


def print_report(pipeline: BatchOrchestrator, written: List[Path]) -> None:
    paths = iter(written)
    for item in pipeline.snapshot():
        if item.status is ItemStatus.DONE:
            print(f"DONE    {item.input.name} -> {next(paths)}")
        elif item.status is ItemStatus.FAILED:
            print(f"FAILED  {item.input.name}: {item.failure_reason}")
        else:
            print(f"PENDING {item.input.name}")


async def run_conversion(
    tool: str,
    files: List[InputFile],
    url: Optional[str],
    options: Dict[str, str],
    output_dir: Path,
    settings: PipelineSettings,
) -> int:
    """Run one tool session end to end; outputs are released when it closes."""
    async with PipelineFactory.create_pipeline(tool, settings=settings) as pipeline:
        pipeline.add_files(files)

        fetch_rejected = False
        if url:
            try:
                await pipeline.add_from_url(url)
            except RemoteFetchError as exc:
                print(f"Could not add {url}: {exc}", file=sys.stderr)
                fetch_rejected = True

        if len(pipeline.queue) == 0:
            print("Nothing to convert.", file=sys.stderr)
            return EXIT_FETCH_REJECTED if fetch_rejected else EXIT_USAGE

        summary = await pipeline.convert_all(options)
        written = write_outputs(pipeline, output_dir)
        print_report(pipeline, written)
        print(
            f"{summary.succeeded} converted, "
            f"{len(pipeline.snapshot()) - summary.succeeded} failed "
            f"in {summary.processing_time:.2f}s"
        )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conversion-pipeline",
        description="Batch file conversion tools (images, QR codes, hashes, metadata, JSON)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert WebP files to JPG at 85% quality
  conversion-pipeline convert webp-to-jpg a.webp b.webp --option quality=0.85

  # Resize everything to fit 1024x768, pulling one more image from a URL
  conversion-pipeline convert image-resizer *.png --url https://example.com/x.png \\
                              --option width=1024 --option height=768 \\
                              --option mode=fit-to-dimensions

  # List tools
  conversion-pipeline tools
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser("convert", help="Run a tool over files")
    convert_parser.add_argument("tool", help="Tool name (see 'tools')")
    convert_parser.add_argument("files", nargs="*", help="Input files")
    convert_parser.add_argument("--url", default=None, help="Fetch one more input from a URL")
    convert_parser.add_argument(
        "--output-dir", default=".", help="Directory for converted files (default: .)"
    )
    convert_parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tool option, repeatable (e.g. quality=0.8)",
    )
    convert_parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    convert_parser.add_argument(
        "--log-format", choices=["structured", "simple"], default=None, help="Override LOG_FORMAT"
    )

    subparsers.add_parser("tools", help="List available tools")
    subparsers.add_parser("version", help="Show version information")
    return parser


def print_tools() -> None:
    for spec in list_tools():
        policy = spec.policy
        print(f"{spec.name:<18} {spec.description}")
        print(
            f"{'':<18} accepts {', '.join(policy.accepted_type_patterns)}; "
            f"up to {policy.max_item_count} files of {format_size_limit(policy.max_item_size_bytes)}"
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``conversion-pipeline`` command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "tools":
        print_tools()
        return EXIT_OK

    if args.command == "version":
        print("Conversion Pipeline CLI")
        print(f"Version {__version__}")
        return EXIT_OK

    if args.command != "convert":
        parser.print_help()
        return EXIT_USAGE

    try:
        get_tool(args.tool)
        settings = PipelineSettings.from_env()
        if args.log_level:
            settings = settings.model_copy(update={"log_level": args.log_level})
        if args.log_format:
            settings = settings.model_copy(update={"log_format": args.log_format})
        options = parse_options(args.option)
        files = read_input_files(args.files)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except OSError as exc:
        print(f"Error reading input: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not files and not args.url:
        print("Error: give at least one file or --url", file=sys.stderr)
        return EXIT_USAGE

    try:
        return asyncio.run(
            run_conversion(args.tool, files, args.url, options, Path(args.output_dir), settings)
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except ArtifactStoreError as exc:
        print(f"Error releasing outputs: {exc}", file=sys.stderr)
        return EXIT_CLEANUP_FAILED


if __name__ == "__main__":
    sys.exit(main())
