import argparse
import sys
from pathlib import Path

from gptplan.config import settings
from gptplan.logging import LoggerFactory, setup_logging
from gptplan.storage import image, report
from gptplan.storage.description import load_description
from gptplan.storage.exceptions import GptPlanError
from gptplan.storage.planner import plan_layout
from gptplan.storage.sizes import normalize_size


def build_parser():
    parser = argparse.ArgumentParser(
        prog="gptplan",
        description="Plan a GPT partition layout and write it to an image or device",
    )
    parser.add_argument("description", nargs="?", help="Partition description file")
    parser.add_argument("-f", "--file", dest="description_file", help="Partition description file")
    parser.add_argument("-o", "--output", help="Image file or block device to write")
    parser.add_argument(
        "-I",
        "--include",
        action="append",
        default=[],
        metavar="DIR",
        help="Extra directory to search for content files (repeatable)",
    )
    parser.add_argument("-s", "--size", help="Target image size, e.g. 4G")
    parser.add_argument(
        "-p", "--partition-only", action="store_true", help="Create partitions but skip content writes"
    )
    parser.add_argument(
        "-r", "--report", action="store_true", help="Print the plan without touching any device"
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Also log raw tool output")
    parser.add_argument("--log-dir", type=Path, help="Also write logs to this directory")
    return parser


def build_include_paths(description_path, extra_paths):
    paths = [str(Path(description_path).resolve().parent)]
    paths.extend(extra_paths)
    paths.extend(settings.get_list("include_paths"))
    return paths


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    description_path = args.description_file or args.description
    if not description_path:
        parser.error("a partition description file is required")

    setup_logging(debug=args.debug, trace=args.trace, log_dir=args.log_dir)
    log = LoggerFactory.for_system()
    report_only = args.report or not args.output

    try:
        requested_size_kb = None
        if args.size:
            requested_size_kb = normalize_size(args.size, field="target size")
        elif not report_only and image.is_block_device(args.output):
            requested_size_kb = image.get_device_size_bytes(args.output) // 1024
            log.debug(f"Using size of {args.output}: {requested_size_kb}K")

        specs = load_description(description_path)
        plan = plan_layout(
            specs,
            include_paths=build_include_paths(description_path, args.include),
            requested_size_kb=requested_size_kb,
            partition_only=args.partition_only,
        )

        if report_only:
            for line in report.format_report(plan):
                print(line)
            log.info(report.format_summary(plan))
            return 0

        image.materialize_plan(args.output, plan, partition_only=args.partition_only)
        log.success(f"Wrote {report.format_summary(plan)} to {args.output}")
    except (GptPlanError, OSError) as error:
        log.error(str(error))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
