"""
Command line front end for the segmentation mask comparator.

Examples:
    segcompare validate originals/ gt/ mine/ unet/
    segcompare compare --original originals/ --gt gt/ --mine mine/ \
        --source unet=results/unet --source deeplab=results/deeplab --json scores.json
    segcompare export --results scores.json --dest picked/ --files 001.png 007.png
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from segcompare import commands
from segcompare.analysis import analyze_results, export_analysis_json, format_percentage, summarize_sources
from segcompare.config import configure_logging
from segcompare.models import ComparisonResult, ComparisonSource, ExportSelection, ProgressEvent

logger = logging.getLogger(__name__)


def parse_source(value: str) -> ComparisonSource:
    """Parse a LABEL=PATH comparison source argument."""
    label, sep, folder = value.partition('=')
    if not sep or not label or not folder:
        raise argparse.ArgumentTypeError(f"Expected LABEL=PATH, got '{value}'")
    return ComparisonSource(label=label, folder=folder)


class TqdmProgress:
    """Progress sink rendering batch progress with a tqdm bar."""

    def __init__(self, desc: str = "Comparing"):
        self.desc = desc
        self.bar = None

    def __call__(self, event: ProgressEvent) -> None:
        if self.bar is None:
            self.bar = tqdm(total=event.total, desc=self.desc, unit="img")
        self.bar.n = event.current
        self.bar.set_postfix_str(event.current_label)
        self.bar.refresh()

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()


def cmd_scan(args) -> int:
    result = commands.scan_folder(args.folder)
    if not result.ok:
        logger.error(result.error)
        return 1
    for name in result.value:
        print(name)
    return 0


def cmd_validate(args) -> int:
    result = commands.validate_folders(args.folders)
    if not result.ok:
        logger.error(result.error)
        return 1

    report = result.value
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0 if report.is_valid else 1


def cmd_compare(args) -> int:
    sources: List[ComparisonSource] = args.source or []
    folders = [args.original, args.gt, args.mine] + [source.folder for source in sources]
    validation = commands.validate_folders(folders)
    if not validation.ok:
        logger.error(validation.error)
        return 1
    if not validation.value.is_valid:
        logger.error("No image files are shared by all folders")
        return 1

    progress = TqdmProgress()
    try:
        result = commands.compare_batch(args.gt, args.mine, sources, validation.value.common_files,
                                        progress=progress, original_folder=args.original)
    finally:
        progress.close()
    results: List[ComparisonResult] = result.value

    for label, stats in summarize_sources(results).items():
        print(f"{label}: IOU {format_percentage(stats['mean_iou'])}, "
              f"accuracy {format_percentage(stats['mean_accuracy'])}")

    if args.json:
        with open(args.json, 'w', encoding='utf-8') as f:
            json.dump([r.to_dict() for r in results], f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {len(results)} results to {args.json}")

    if args.analysis:
        export_analysis_json(args.analysis, analyze_results(results))
    return 0


def cmd_export(args) -> int:
    try:
        with open(args.results, 'r', encoding='utf-8') as f:
            results = [ComparisonResult.from_dict(item) for item in json.load(f)]
    except OSError as e:
        logger.error(f"Cannot read results file {args.results}: {e}")
        return 1
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Malformed results file {args.results}: {e}")
        return 1

    wanted = set(args.files) if args.files else None
    selections = [ExportSelection.from_result(r) for r in results
                  if wanted is None or r.filename in wanted]

    result = commands.export_selected(args.dest, selections)
    if not result.ok:
        logger.error(result.error)
        return 1
    print(result.value.message)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segcompare",
        description="Compare segmentation masks of several result folders against ground truth.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also write log records to this file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="List the images of a folder")
    scan.add_argument("folder")
    scan.set_defaults(func=cmd_scan)

    validate = subparsers.add_parser("validate", help="Find the images shared by all folders")
    validate.add_argument("folders", nargs="+",
                          help="source images, ground truth, primary result, comparison folders...")
    validate.set_defaults(func=cmd_validate)

    compare = subparsers.add_parser("compare", help="Score result folders against ground truth")
    compare.add_argument("--original", required=True, help="Folder of the source images")
    compare.add_argument("--gt", required=True, help="Ground truth mask folder")
    compare.add_argument("--mine", required=True, help="Primary result mask folder")
    compare.add_argument("--source", action="append", type=parse_source, metavar="LABEL=PATH",
                         help="Comparison result folder (repeatable)")
    compare.add_argument("--json", help="Write per-image results to this JSON file")
    compare.add_argument("--analysis", help="Write per-image case analysis to this JSON file")
    compare.set_defaults(func=cmd_compare)

    export = subparsers.add_parser("export", help="Copy images of selected results into a folder tree")
    export.add_argument("--results", required=True, help="Results JSON written by 'compare --json'")
    export.add_argument("--dest", required=True, help="Existing destination folder")
    export.add_argument("--files", nargs="*", help="Filenames to export (default: all)")
    export.set_defaults(func=cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
