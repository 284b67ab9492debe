# brandscan/cli.py
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys

from brandscan.config import settings
from brandscan.enhance.client import EnhancementClient
from brandscan.exceptions import BrandExtractionError, FetchFailedError, InvalidURLError
from brandscan.pipeline import extract_brand

# Exit codes
EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_INVALID_URL = 2


def _cmd_extract(args: argparse.Namespace) -> int:
    enhance_cfg = settings.enhance
    if args.no_enhance:
        enhance_cfg = dataclasses.replace(enhance_cfg, enabled=False)

    try:
        with EnhancementClient(enhance_cfg) as enhancer:
            profile = extract_brand(args.url, enhancer=enhancer)
    except BrandExtractionError as exc:
        payload = {"error": str(exc), "code": exc.code}
        if isinstance(exc, FetchFailedError) and exc.status_code is not None:
            payload["status"] = exc.status_code
        print(json.dumps(payload), file=sys.stderr)
        return EXIT_INVALID_URL if isinstance(exc, InvalidURLError) else EXIT_FETCH_FAILED

    indent = 2 if args.pretty else None
    print(json.dumps(profile.to_dict(), indent=indent, ensure_ascii=False))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brandscan",
        description="Extract a brand profile (name, colors, logo, keywords) from a website.",
    )
    parser.add_argument("url", help="Website URL or bare host, e.g. acme.com")
    parser.add_argument(
        "--no-enhance",
        action="store_true",
        help="Skip the AI enhancement step even if a token is configured.",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent the JSON output.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level (default: INFO to stderr).",
    )
    parser.set_defaults(func=_cmd_extract)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
