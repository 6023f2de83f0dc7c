import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import List, Optional

from ytharvest.core.config_file import build_request, load_config
from ytharvest.core.errors import HarvestError
from ytharvest.core.logging import setup_logging
from ytharvest.core.settings import settings

logger = logging.getLogger("ytharvest.cli")


def comma_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def true_false(value: str) -> bool:
    return value.strip().lower() == "true"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="yt-harvest",
        description="Fetch YouTube video metadata for a named search and merge it into JSON files and the database.",
    )
    parser.add_argument("--config-file", help=f"YAML search config (default: {settings.config_file})")
    parser.add_argument("--search-name")
    parser.add_argument("--disease", help="legacy alias of --search-name")
    parser.add_argument("--search-phrase", dest="search_phrases", type=comma_list,
                        help="comma separated phrases; prefix a phrase with '-' to exclude it")
    parser.add_argument("--channel-name", dest="channels", type=comma_list, help="comma separated channel ids")
    parser.add_argument("--max-results", type=int)
    parser.add_argument("--output-file")
    parser.add_argument("--video-ids-file")
    parser.add_argument("--start-date", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--end-date", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("--min-view-count", type=int)
    parser.add_argument("--min-duration", type=int, help="seconds")
    parser.add_argument("--has-content", type=true_false, help="true/false")
    parser.add_argument("--video-id")
    parser.add_argument("--reset-outputs", action="store_true", default=None,
                        help="empty both output files before the run")
    parser.add_argument("--continue-on-channel-error", action="store_true", default=None)
    parser.add_argument("--create-tables", action="store_true", help="create database tables before running")
    return parser


async def run_cli(args: argparse.Namespace) -> int:
    from ytharvest.services.pipeline import run

    overrides = {k: v for k, v in vars(args).items() if k not in ("config_file", "create_tables")}
    request = build_request(load_config(args.config_file), overrides)
    if not request.search_name and not request.video_id:
        build_parser().print_usage(sys.stderr)
        logger.error("A search name (--search-name or config searchName) or --video-id is required")
        return 1

    if args.create_tables:
        from ytharvest.core.database import create_tables
        await create_tables()

    try:
        totals = await run(request)
    except HarvestError as e:
        logger.error(f"Error: {e}", exc_info=True)
        return 1

    if totals.failed_channels:
        logger.warning(f"Channels that failed: {', '.join(totals.failed_channels)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)
    return asyncio.run(run_cli(args))


if __name__ == "__main__":
    sys.exit(main())
