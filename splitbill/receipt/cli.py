"""CLI entry point for the receipt module."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from .config import load_config
from .payload import ImagePayload
from .pipeline import ReceiptPipeline
from .summary import format_price, summarize_prices
from .vision import create_backend


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="splitbill-receipt",
        description="Receipt ingestion: turn a receipt photo into shareable line items",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to a TOML config file",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="log debug output"
    )

    sub = parser.add_subparsers(dest="command")

    # scan
    scan_parser = sub.add_parser("scan", help="extract line items from a receipt image")
    scan_parser.add_argument("image", type=str, help="receipt image file")
    scan_parser.add_argument("--json", action="store_true", help="print JSON")

    # prices
    prices_parser = sub.add_parser(
        "prices", help="summarize final prices of a JSON item list"
    )
    prices_parser.add_argument("file", type=str, help="JSON file with an item list")
    prices_parser.add_argument(
        "--no-ai", action="store_true", help="skip the model-written breakdown"
    )

    # serve
    serve_parser = sub.add_parser("serve", help="run the HTTP service")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config)

    match args.command:
        case "scan":
            asyncio.run(_cmd_scan(config, args))
        case "prices":
            asyncio.run(_cmd_prices(config, args))
        case "serve":
            _cmd_serve(config, args)


async def _cmd_scan(config, args) -> None:
    try:
        image = ImagePayload.from_file(args.image)
    except OSError as e:
        print(f"Cannot read image: {e}", file=sys.stderr)
        sys.exit(1)

    pipeline = ReceiptPipeline.from_config(config)
    result = await pipeline.process(image)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        sys.exit(1)
    if not result.items:
        print("No items detected.")
        return

    sep = config.parser
    print(f"Items ({len(result.items)}):")
    for item in result.items:
        price = format_price(item.price, sep.thousands_separator, sep.decimal_separator)
        print(f"  {item.name:<30} {config.summary.currency} {price:>12}")


async def _cmd_prices(config, args) -> None:
    try:
        with open(args.file, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Cannot read items: {e}", file=sys.stderr)
        sys.exit(1)

    items = data.get("items") if isinstance(data, dict) else data
    backend = None if args.no_ai else create_backend(config)
    try:
        summary = await summarize_prices(
            items,
            backend=backend,
            currency=config.summary.currency,
            thousands_separator=config.parser.thousands_separator,
            decimal_separator=config.parser.decimal_separator,
        )
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(summary.calculation)


def _cmd_serve(config, args) -> None:
    try:
        import uvicorn
    except ImportError:
        raise ImportError("uvicorn is required: pip install uvicorn") from None

    from .server import create_app

    uvicorn.run(
        create_app(config),
        host=args.host or config.server.host,
        port=args.port or config.server.port,
    )


if __name__ == "__main__":
    main()
