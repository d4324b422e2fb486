from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from cryptography.exceptions import UnsupportedAlgorithm

from . import __version__
from .certinfo import summarize
from .errors import ToolNotFoundError
from .scanner import OutcomeKind, ScanRequest, Scanner

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_TOOL_NOT_FOUND = 2
EXIT_SCAN_FAILED = 3
EXIT_DECODE_FAILED = 4

_EXIT_CODES = {
    OutcomeKind.SUCCESS: EXIT_OK,
    OutcomeKind.START_FAILURE: EXIT_SCAN_FAILED,
    OutcomeKind.CANCELLED: EXIT_SCAN_FAILED,
    OutcomeKind.DECODE_FAILURE: EXIT_DECODE_FAILED,
}


def _write_output(out_path: str | None, text: str) -> None:
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sslscan-runner",
        description="Run sslscan against a target and print its findings as JSON.",
    )
    p.add_argument("target", nargs="?", help="Target host[:port] (e.g., example.com:443)")
    p.add_argument("--sni", help="SNI name to send (passed as --sni-name)")
    p.add_argument("--timeout", type=float, help="Kill sslscan after this many seconds")
    p.add_argument(
        "--binary",
        default=os.environ.get("SSLSCAN_PATH"),
        help="Path to the sslscan binary (default: $SSLSCAN_PATH, then PATH lookup)",
    )
    p.add_argument(
        "--arg",
        action="append",
        default=[],
        dest="extra_args",
        metavar="ARG",
        help="Extra argument passed to sslscan (repeatable, e.g. --arg=--no-heartbleed)",
    )
    p.add_argument(
        "--show-certificate",
        action="store_true",
        help="Ask sslscan for full certificates and add X.509 details to the output",
    )
    p.add_argument("--starttls", metavar="PROTO", help="STARTTLS protocol (e.g. smtp, imap)")
    p.add_argument("--out", "-o", help="Write output to file (default: stdout)")
    p.add_argument("--raw", action="store_true", help="Print sslscan's XML instead of JSON")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


def _build_request(args: argparse.Namespace) -> ScanRequest:
    request = ScanRequest(target=args.target).with_timeout(args.timeout)
    if args.binary:
        request = request.with_binary_path(args.binary)
    if args.sni:
        request = request.with_sni(args.sni)
    if args.starttls:
        request = request.with_starttls(args.starttls)
    if args.show_certificate:
        request = request.with_show_certificate()
    return request.add_args(*args.extra_args)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(__version__)
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.target:
        print("Error: target is required", file=sys.stderr)
        return EXIT_USAGE

    try:
        scanner = Scanner(_build_request(args))
    except ToolNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_TOOL_NOT_FOUND

    outcome = scanner.run_sync()

    if args.raw:
        _write_output(args.out, (outcome.raw or b"").decode("utf-8", errors="replace"))
        return _EXIT_CODES[outcome.kind]

    warnings = list(outcome.warnings)
    result: dict[str, Any] | None = None
    if outcome.result is not None:
        result = outcome.result.to_dict()
        if args.show_certificate and outcome.result.ssltest is not None:
            for index, (cert_dict, cert) in enumerate(
                zip(result["ssltest"]["certificates"], outcome.result.ssltest.certificates)
            ):
                try:
                    cert_dict["x509"] = summarize(cert)
                except (ValueError, UnsupportedAlgorithm) as e:
                    cert_dict["x509"] = None
                    warnings.append(f"certificate {index}: could not load PEM blob: {e}")

    payload = {
        "target": args.target,
        "version": __version__,
        "outcome": outcome.kind.value,
        "result": result,
        "warnings": warnings,
        "errors": [] if outcome.error is None else [str(outcome.error)],
    }

    _write_output(args.out, json.dumps(payload, indent=2, ensure_ascii=False))
    return _EXIT_CODES[outcome.kind]


if __name__ == "__main__":
    raise SystemExit(main())
