"""Command-line entry point for bulk URL status checks.

Usage examples:
  url-status-checker example.com https://www.example.com
  url-status-checker --file urls.txt --export csv --group clientError
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from .classifier import StatusGroup
from .metrics import compute_stats
from .scheduler import Progress, check_urls
from .settings import load_check_config, load_proxy_from_txt
from .storage import EXPORT_FORMATS, save_results

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Check reachability and HTTP status for a batch of URLs.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("urls", nargs="*", help="URLs to check")
    parser.add_argument(
        "--file",
        type=Path,
        action="append",
        help="Read URLs from a file (one per line). Can be provided multiple times.",
    )
    parser.add_argument("--config", type=Path, help="YAML file overriding the check config.")
    parser.add_argument("--proxy-file", type=Path, help="Text file holding a single proxy URL; enables the proxy.")
    parser.add_argument("--export", choices=EXPORT_FORMATS, help="Save results in this format.")
    parser.add_argument(
        "--group",
        choices=[g.value for g in StatusGroup],
        help="Only export results in this status group.",
    )
    parser.add_argument("--name", default="url-status-results", help="Export file name (no extension).")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("results"),
        help="Directory for exports, relative to the working directory.",
    )
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def parse_urls_from_text(lines: Iterable[str]) -> List[str]:
    parsed: List[str] = []
    for raw in lines:
        url = raw.strip()
        if not url or url.startswith("#"):
            continue
        parsed.append(url)
    return parsed


def collect_urls(args: argparse.Namespace) -> List[str]:
    urls = parse_urls_from_text(args.urls)
    for path in args.file or []:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"Failed to read URLs from {path}: {exc}") from exc
        urls.extend(parse_urls_from_text(text.splitlines()))
    return urls


def resolve_user_path(path: Path) -> Path:
    path = path.expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        urls = collect_urls(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    if not urls:
        print("No URLs provided.", file=sys.stderr)
        return 2

    # Relative paths come from the working directory
    if args.config:
        config_path = resolve_user_path(args.config)
        if not config_path.exists():
            logger.error("Config file not found: %s", config_path)
            return 2
        config = load_check_config(config_path)
    else:
        config = load_check_config()

    proxy = None
    if args.proxy_file:
        proxy = load_proxy_from_txt(str(resolve_user_path(args.proxy_file)))
        if not proxy.server:
            logger.error("No usable proxy in %s", args.proxy_file)
            return 2
        config = replace(config, use_proxy=True)

    with tqdm(total=100, unit="%", desc="Checking") as bar:
        def on_progress(p: Progress) -> None:
            bar.update(p.percent - bar.n)

        results = asyncio.run(check_urls(urls, config=config, proxy=proxy, on_progress=on_progress))

    stats = compute_stats(results)
    print(f"Total URLs checked:     {stats.total}")
    print(f"Live:                   {stats.live}")
    print(f"Redirects:              {stats.redirect}")
    print(f"Client errors (4xx):    {stats.client_error}")
    print(f"Server/network errors:  {stats.server_error}")
    print(f"Avg. response time:     {stats.avg_response_time_ms}ms")
    print(f"Success rate:           {stats.success_rate}%")

    if args.export:
        save_results(
            results, name=args.name, fmt=args.export, group=args.group,
            results_dir=resolve_user_path(args.output_dir),
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
