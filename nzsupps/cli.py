"""Command-line runners for the scrapers.

Usage:
    nzsupps-scrape --shop xplosiv --category protein
    nzsupps-scrape --shop chemistwarehouse --category creatine --sample 20
    nzsupps-scrape --all --category protein
    nzsupps-scrape --all --category creatine --order sprintfit,nowhey --no-save

Exit codes: 0 on success, 2 when any retailer reported errors, 1 on bad
arguments.
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional, Sequence, TextIO

from nzsupps.config import settings
from nzsupps.core.logging import configure_logging
from nzsupps.scrapers.factory import ExtractorFactory
from nzsupps.scrapers.register_adapters import register_all_extractors
from nzsupps.scrapers.runner import DEFAULT_ORDER, ScrapeRunner, Sink
from nzsupps.scrapers.schema import Category, Product

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_ERRORS = 2

DEFAULT_SAMPLE_SIZE = 50


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits 2 on bad usage; 2 is reserved for scrape errors here."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def sample_products(products: List[Product], size: int = DEFAULT_SAMPLE_SIZE) -> List[Product]:
    """Return all products, or the first and last halves when there are more than size."""
    if len(products) <= size:
        return list(products)
    half = size // 2
    return list(products[:half]) + list(products[-half:])


async def run_single(
    key: str,
    category: Category,
    factory: ExtractorFactory,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Scrape one retailer and print a JSON sample of what came back."""
    out = out or sys.stdout
    err = err or sys.stderr
    runner = ScrapeRunner(factory=factory)
    result = await runner.run_retailer(key, category)

    payload = {
        "totalProducts": len(result.products),
        "sample": [p.to_dict() for p in sample_products(result.products, sample_size)],
    }
    out.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")

    if result.errors:
        err.write("Errors:\n")
        for message in result.errors:
            err.write(f"  {message}\n")
        return EXIT_ERRORS
    return EXIT_OK


async def run_all(
    category: Category,
    factory: ExtractorFactory,
    sink: Optional[Sink] = None,
    order: Optional[Sequence[str]] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Scrape a category across retailers, saving each batch through sink."""
    out = out or sys.stdout
    runner = ScrapeRunner(factory=factory, sink=sink)
    summary = await runner.run_category(category, order=order)

    out.write(summary.format_summary() + "\n")
    return EXIT_OK if summary.ok else EXIT_ERRORS


async def _database_sink() -> Sink:
    from nzsupps.db.session import init_models
    from nzsupps.db.sink import save_products

    await init_models()
    return save_products


async def _run(args: argparse.Namespace) -> int:
    factory = register_all_extractors()
    category = Category(args.category)

    if args.shop:
        return await run_single(args.shop, category, factory, sample_size=args.sample)

    sink = None if args.no_save else await _database_sink()
    order = [key.strip() for key in args.order.split(",") if key.strip()] if args.order else None
    return await run_all(category, factory, sink=sink, order=order)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="nzsupps-scrape",
        description="Scrape NZ supplement retailers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--shop",
        choices=DEFAULT_ORDER,
        help="Scrape a single retailer and print a JSON sample",
    )
    target.add_argument(
        "--all",
        action="store_true",
        help="Scrape every retailer and save the results",
    )

    parser.add_argument(
        "--category",
        choices=[c.value for c in Category],
        default=Category.PROTEIN.value,
        help="Product category (default: protein)",
    )
    parser.add_argument(
        "--sample",
        type=int,
        default=DEFAULT_SAMPLE_SIZE,
        help="Products to print with --shop (default: 50)",
    )
    parser.add_argument(
        "--order",
        help="Comma-separated retailer keys to run with --all",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Skip the database sink with --all",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments and run the scrape."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.sample <= 0:
        parser.error("--sample must be positive")

    configure_logging(
        level="DEBUG" if args.verbose else settings.LOG_LEVEL,
        json_logs=settings.LOG_JSON,
    )

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
