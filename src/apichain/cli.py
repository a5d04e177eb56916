"""Command line entry point for one-off API calls."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence

from apichain.client import api
from apichain.exceptions import ApiChainError, ApiHTTPError
from apichain.interceptors import LoggingInterceptor
from apichain.observability import configure_logging
from apichain.request_options import HTTP_METHODS


def _parse_pairs(values: Sequence[str], separator: str, label: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition(separator)
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"{label} must look like KEY{separator}VALUE: {raw!r}")
        pairs[key.strip()] = value.strip()
    return pairs


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apichain", description="Perform a single API call.")
    parser.add_argument("method", type=str.lower, choices=sorted(HTTP_METHODS))
    parser.add_argument("url", help="Path appended to the API URL, e.g. /thngs")
    parser.add_argument("--api-url", dest="api_url")
    parser.add_argument("--api-key", dest="api_key")
    parser.add_argument("-H", "--header", action="append", default=[], dest="headers")
    parser.add_argument("-p", "--param", action="append", default=[], dest="params")
    parser.add_argument("--data", help="JSON request body")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        headers = _parse_pairs(args.headers, ":", "header")
        params = _parse_pairs(args.params, "=", "param")
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    options: dict[str, Any] = {
        "method": args.method,
        "url": args.url,
        "api_url": args.api_url,
        "api_key": args.api_key,
        "headers": headers or None,
        "params": params or None,
    }
    if args.data is not None:
        try:
            options["body"] = json.loads(args.data)
        except json.JSONDecodeError as exc:
            parser.error(f"--data is not valid JSON: {exc}")

    configure_logging(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.verbose:
        options["interceptors"] = [LoggingInterceptor()]

    try:
        result = asyncio.run(api(options))
    except ApiHTTPError as exc:
        print(json.dumps(exc.body, indent=2, default=str), file=sys.stderr)
        return 1
    except ApiChainError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


def main() -> None:
    raise SystemExit(_main())
