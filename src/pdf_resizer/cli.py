"""
Module: cli

Purpose:
    Command line entry point (`pdf-resizer`). Exports one source to one or
    more sizes given as shorthand (--spec) or in a JSON job file (--job);
    flags override job settings.

Spec shorthand:
    fill:WxH          PDF covering W × H mm (crops overflow)
    width:W           PDF W mm wide, height from the source aspect
    height:H          PDF H mm high, width from the source aspect
    scale:F           PDF scaled by factor F
    png:ppi:N         PNG at N ppi (also png:width:N / png:height:N px)
    png-fit:...       PNG letterboxed instead of cropped
    ...,margin=M      Margin per side (mm or px)
    ...,outside       Add the margin around the target instead of inside

Exit codes:
    0 success, 1 a task failed or the run was cancelled, 2 run error

Dependencies:
    - argparse (std)
    - export: run_export, load_job

Used By:
    - pyproject console script, run_pdf_resizer.py
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pdf_resizer import __version__
from pdf_resizer.core.models import (
    Axis,
    FillParams,
    FitParams,
    LockField,
    OutputFormat,
    PaddingPolicy,
    RasterParams,
    ScaleParams,
    SizeMode,
    SizeSpec,
)
from pdf_resizer.core.schemas import ValidationError
from pdf_resizer.core.units import format_size, parse_length
from pdf_resizer.export import (
    ALL_PAGES,
    CONFLICT_POLICIES,
    ExportConfig,
    ExportError,
    ExportJob,
    load_job,
    run_export,
)
from pdf_resizer.naming import SIZE_TOKEN, suggest_template

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TASK_FAILURE = 1
EXIT_RUN_ERROR = 2


def parse_spec(text: str) -> SizeSpec:
    """
    Parse spec shorthand into a SizeSpec.

    Raises:
        argparse.ArgumentTypeError: If the shorthand is malformed

    Example:
        >>> parse_spec("width:150,margin=5").mode
        <SizeMode.FIT_HEIGHT: 'fit_height'>
    """
    head, *options = [part.strip() for part in text.split(",")]
    margin = 0.0
    padding = PaddingPolicy.INSIDE
    try:
        for option in options:
            if option == "outside":
                padding = PaddingPolicy.OUTSIDE
            elif option == "inside":
                padding = PaddingPolicy.INSIDE
            elif option.startswith("margin="):
                margin = parse_length(option.split("=", 1)[1])
            else:
                raise ValueError(f"unknown option {option!r}")

        kind, _, rest = head.partition(":")
        if kind in ("png", "png-fit"):
            field_name, _, value = rest.partition(":")
            mode = SizeMode.SCALE if kind == "png-fit" else SizeMode.FILL
            params = RasterParams(LockField(field_name), parse_length(value), mode)
            return SizeSpec(params, output_format=OutputFormat.PNG, margin=margin, padding=padding)

        if kind == "fill":
            width, _, height = rest.lower().partition("x")
            params = FillParams(parse_length(width), parse_length(height))
        elif kind == "width":
            params = FitParams(Axis.WIDTH, parse_length(rest))
        elif kind == "height":
            params = FitParams(Axis.HEIGHT, parse_length(rest))
        elif kind == "scale":
            params = ScaleParams(parse_length(rest))
        else:
            raise ValueError(f"unknown size kind {kind!r}")
        return SizeSpec(params, margin=margin, padding=padding)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid size {text!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-resizer",
        description="Resize PDF pages and images to explicit output sizes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s flyer.pdf --spec fill:210x297 --spec width:100,margin=5
  %(prog)s photo.jpg --spec png:ppi:150 --name "photo_*size*_*YYMMDD*"
  %(prog)s --job print-run.json --on-conflict skip
        """,
    )
    parser.add_argument("source", nargs="?", type=Path, help="Source PDF or image")
    parser.add_argument("--job", type=Path, help="JSON job file")
    parser.add_argument(
        "--spec",
        action="append",
        type=parse_spec,
        help="Output size shorthand (repeatable)",
    )
    parser.add_argument("-o", "--output-dir", type=Path, help="Output directory (default: next to source)")
    parser.add_argument("--subfolder", help="Subfolder of the output directory")
    parser.add_argument("--name", help="Filename template (*size*, *YYMMDD*, *DDMMYY*)")
    pages = parser.add_mutually_exclusive_group()
    pages.add_argument("--all-pages", action="store_true", help="Export every page")
    pages.add_argument("--page", type=int, help="1-based page to export (default: 1)")
    parser.add_argument("--trim", type=float, help="Trim per side in mm")
    parser.add_argument(
        "--on-conflict",
        choices=sorted(CONFLICT_POLICIES),
        help="What to do with existing files (default: overwrite)",
    )
    parser.add_argument("--workers", type=int, help="Concurrent render workers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def default_template(source: Path) -> str:
    """Template from the source filename, with a size token so sizes never collide."""
    template = suggest_template(source.name)
    if SIZE_TOKEN not in template:
        template = f"{template}_{SIZE_TOKEN}"
    return template


def build_config(args: argparse.Namespace, source: Path, job: Optional[ExportJob]) -> ExportConfig:
    """Merge job settings with command line overrides."""
    if job is not None:
        config = job.config
    else:
        config = ExportConfig(output_dir=source.parent, base_name=default_template(source))

    overrides = {}
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if args.subfolder is not None:
        overrides["subfolder"] = args.subfolder
    if args.name is not None:
        overrides["base_name"] = args.name
    if args.all_pages:
        overrides["pages"] = ALL_PAGES
    elif args.page is not None:
        if args.page < 1:
            raise ValueError(f"--page must be >= 1: {args.page}")
        overrides["pages"] = args.page - 1
    if args.trim is not None:
        overrides["trim"] = args.trim
    if args.workers is not None:
        overrides["max_workers"] = args.workers
    return dataclasses.replace(config, **overrides) if overrides else config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    job: Optional[ExportJob] = None
    if args.job is not None:
        try:
            job = load_job(args.job)
        except ValidationError as e:
            logger.error(f"Invalid job file {args.job}: {e}")
            for detail in e.errors:
                logger.error(f"  {detail}")
            return EXIT_RUN_ERROR
        except OSError as e:
            logger.error(f"Cannot read job file: {e}")
            return EXIT_RUN_ERROR

    source = args.source or (job.source if job else None)
    if source is None:
        parser.print_usage(sys.stderr)
        logger.error("No source given (argument or job file 'source')")
        return EXIT_RUN_ERROR

    specs = args.spec or (list(job.specs) if job else [])
    if not specs:
        logger.error("No output sizes given (--spec or job file 'sizes')")
        return EXIT_RUN_ERROR
    for spec in specs:
        logger.debug(f"Size: {describe_spec(spec)}")

    try:
        config = build_config(args, source, job)
        data = source.read_bytes()
    except (ValueError, OSError) as e:
        logger.error(f"{e}")
        return EXIT_RUN_ERROR

    policy = args.on_conflict or (job.on_conflict if job else "overwrite")
    try:
        result = run_export(data, specs, config, on_conflict=CONFLICT_POLICIES[policy])
    except (ExportError, OSError) as e:
        logger.error(f"Export failed: {e}")
        return EXIT_RUN_ERROR

    if result.cancelled:
        logger.warning("Export cancelled: output files already exist")
        return EXIT_TASK_FAILURE

    for name in result.written:
        logger.info(f"  wrote   {name}")
    for name in result.skipped:
        logger.info(f"  skipped {name}")
    for message in result.error_messages:
        logger.error(f"  failed  {message}")

    logger.info(
        f"{len(result.written)} written, {len(result.skipped)} skipped, "
        f"{len(result.errors)} failed → {config.destination_dir}"
    )
    return EXIT_OK if result.success else EXIT_TASK_FAILURE


def describe_spec(spec: SizeSpec) -> str:
    """One-line label for a spec, as used in verbose listings."""
    params = spec.params
    if isinstance(params, FillParams):
        label = f"fill {format_size(params.width, params.height)}"
    elif isinstance(params, FitParams):
        label = f"{params.axis.value} {params.value:g} mm"
    elif isinstance(params, ScaleParams):
        label = f"scale {params.factor:g}"
    else:
        label = f"png {params.lock_field.value} {params.value:g} ({params.mode.value})"
    if spec.margin:
        label += f", margin {spec.margin:g} {spec.output_format.unit} {spec.padding.value}"
    return label


if __name__ == "__main__":
    raise SystemExit(main())
