"""CLI entrypoint with run/extract/check commands."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config import FetchSettings, JobConfig, load_config
from .errors import SoupSchemaError
from .extraction import Extracted, extract, parse_document, parse_fragment
from .formats import Format, dumps, load_schema, result_to_data
from .http_fetcher import DocumentFetcher
from .schema import compile_schema

logger = logging.getLogger(__name__)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="soupschema", description="Declarative HTML data extraction")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    formats = [f.value for f in Format]

    run_p = sub.add_parser("run", help="Fetch the job URL and extract every schema in the job file")
    run_p.add_argument("--config", required=True, help="Path to job file (.toml/.yaml/.json)")
    run_p.add_argument("--url", help="Override the job URL")
    run_p.add_argument("--format", choices=formats, help="Output format (default from job file)")
    run_p.add_argument("--fragment", action="store_true", default=None, help="Parse the document as a fragment")
    run_p.add_argument("--keep-empty", action="store_true", help="Emit fields that matched nothing as empty lists")

    extract_p = sub.add_parser("extract", help="Extract from a local file or stdin")
    extract_p.add_argument("--schema", required=True, help="Path to schema file (.toml/.yaml/.json)")
    extract_p.add_argument("--input", default="-", help="HTML file to read, '-' for stdin")
    extract_p.add_argument("--format", choices=formats, default=Format.TOML.value)
    extract_p.add_argument("--fragment", action="store_true", help="Parse the input as a fragment")
    extract_p.add_argument("--keep-empty", action="store_true", help="Emit fields that matched nothing as empty lists")

    check_p = sub.add_parser("check", help="Compile a schema file and report errors")
    check_p.add_argument("--schema", required=True)
    return parser


async def _fetch(url: str, settings: FetchSettings) -> str:
    async with DocumentFetcher.from_settings(settings) as fetcher:
        result = await fetcher.fetch(url, cache_ttl=settings.cache_ttl)
    logger.info("Fetched %s (%s, %.0f ms%s)", url, result.status_code, result.elapsed, ", cached" if result.from_cache else "")
    return result.raise_for_error()


def run_job(config: JobConfig, html: str, fragment: bool, omit_empty: bool) -> Dict[str, object]:
    compiled = {name: compile_schema(raw) for name, raw in config.fields.items()}
    root = parse_fragment(html) if fragment else parse_document(html)
    results: Dict[str, Extracted] = {name: extract(root, schema) for name, schema in compiled.items()}
    return {name: result_to_data(result, omit_empty=omit_empty) for name, result in results.items()}


def _run(args: argparse.Namespace) -> str:
    config = load_config(args.config)
    url = args.url or config.url
    if not url:
        raise SoupSchemaError(f"no url given in {args.config} or on the command line")
    fragment = config.output.fragment if args.fragment is None else args.fragment
    omit_empty = config.output.omit_empty and not args.keep_empty
    html = asyncio.run(_fetch(url, config.fetch))
    data = run_job(config, html, fragment=fragment, omit_empty=omit_empty)
    return dumps(data, args.format or config.output.format)


def _read_schema(path: str):
    return load_schema(Path(path).read_text(encoding="utf-8"), Format.from_suffix(path))


def _extract(args: argparse.Namespace) -> str:
    schema = _read_schema(args.schema)
    if args.input == "-":
        html = sys.stdin.read()
    else:
        html = Path(args.input).read_text(encoding="utf-8")
    root = parse_fragment(html) if args.fragment else parse_document(html)
    data = result_to_data(extract(root, schema), omit_empty=not args.keep_empty)
    return dumps(data, args.format)


def _check(args: argparse.Namespace) -> str:
    schema = _read_schema(args.schema)
    return f"{args.schema}: ok ({schema.node_count()} nodes)"


def main(argv: Optional[List[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")
    commands = {"run": _run, "extract": _extract, "check": _check}
    try:
        output = commands[args.command](args)
    except (SoupSchemaError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    print(output.rstrip("\n"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
