"""
asyncllm - Command Line

Stream an LLM endpoint and print normalized events as JSON lines.

Usage:
    python -m asyncllm https://api.openai.com/v1/chat/completions \\
        -H "Authorization: Bearer $OPENAI_API_KEY" \\
        -d '{"model": "gpt-4o-mini", "stream": true, "messages": [...]}'

    # Same OpenAI body against Anthropic
    python -m asyncllm https://api.anthropic.com/v1/messages --provider anthropic \\
        -H "x-api-key: $ANTHROPIC_API_KEY" -H "anthropic-version: 2023-06-01" \\
        -f body.json --final

Exit codes: 0 on success, 1 if any error event was streamed, 2 on bad input.
"""

import argparse
import asyncio
import json
import sys
from typing import Dict, List, Optional, TextIO, Tuple

import httpx

from .client import async_llm
from .config import Settings
from .core.errors import AsyncLLMError
from .core.http_client import SSERequest
from .core.models import NormalizedEvent
from .observability import setup_observability
from .translators import TRANSLATORS, get_translator


class UsageError(Exception):
    """Bad command-line input."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asyncllm",
        description="Stream an LLM endpoint and print normalized events as JSON lines.",
    )
    parser.add_argument("url", help="Streaming endpoint URL")
    parser.add_argument("-X", "--method", help="HTTP method (default: POST with a body, else GET)")
    parser.add_argument(
        "-H", "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Request header, repeatable",
    )
    body = parser.add_mutually_exclusive_group()
    body.add_argument("-d", "--data", help="Request body")
    body.add_argument("-f", "--file", help="Read the request body from a file ('-' for stdin)")
    parser.add_argument(
        "--provider",
        choices=sorted(TRANSLATORS),
        help="Translate an OpenAI chat-completions body to this provider first",
    )
    parser.add_argument("--final", action="store_true", help="Print only the last event")
    parser.add_argument("--trace", action="store_true", help="Print OpenTelemetry spans to stderr")
    return parser


def parse_header(raw: str) -> Tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise UsageError(f"Invalid header {raw!r}, expected 'Name: value'")
    return name.strip(), value.strip()


def _read_body(args: argparse.Namespace, stdin: TextIO) -> Optional[str]:
    if args.data is not None:
        return args.data
    if args.file is None:
        return None
    if args.file == "-":
        return stdin.read()
    try:
        with open(args.file, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise UsageError(f"Cannot read {args.file}: {e}") from None


def build_request(args: argparse.Namespace, stdin: TextIO = sys.stdin) -> SSERequest:
    """
    Turn parsed arguments into an SSERequest.

    Raises:
        UsageError: Malformed header or body
        TranslationError: Body cannot be translated for --provider
    """
    headers: Dict[str, str] = dict(parse_header(h) for h in args.header)
    body = _read_body(args, stdin)

    if body is not None and not any(name.lower() == "content-type" for name in headers):
        headers["Content-Type"] = "application/json"

    if args.provider is None:
        return SSERequest(url=args.url, method=args.method, headers=headers, body=body)

    if body is None:
        raise UsageError("--provider needs a request body (-d or -f)")
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise UsageError(f"Request body is not valid JSON: {e}") from None

    return SSERequest(
        url=args.url,
        method=args.method,
        headers=headers,
        json=get_translator(args.provider)(payload),
    )


def _print_event(event: NormalizedEvent, out: TextIO):
    out.write(json.dumps(event.to_dict(), ensure_ascii=False) + "\n")
    out.flush()


async def stream(
    request: SSERequest,
    final_only: bool = False,
    out: TextIO = sys.stdout,
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> int:
    """
    Stream ``request`` and print its events.

    Returns:
        Exit code: 1 if any error event was seen, else 0
    """
    saw_error = False
    last: Optional[NormalizedEvent] = None

    async for event in async_llm(request, client=client, settings=settings):
        saw_error = saw_error or event.is_error
        if final_only:
            last = event
        else:
            _print_event(event, out)

    if final_only and last is not None:
        _print_event(last, out)

    return 1 if saw_error else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        request = build_request(args)
    except (UsageError, AsyncLLMError) as e:
        print(f"asyncllm: {e}", file=sys.stderr)
        return 2

    setup_observability(
        service_name="asyncllm-cli",
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        enable_metrics=settings.metrics_enabled,
        enable_tracing=args.trace,
        console_export=True,
    )

    try:
        return asyncio.run(stream(request, final_only=args.final, settings=settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
