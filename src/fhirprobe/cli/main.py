# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""fhirprobe CLI."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Any

from ..config import HttpSettings, load_http_settings
from ..http import create_default_http_client
from ..log import setup_logging
from ..runtime import FhirProbe

CLI_TEXT_TRUNCATION_BYTES = 4096


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Probe a FHIR endpoint's capability statement and validate it")
    parser.add_argument("url", help="FHIR base URL (or its /metadata URL)")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument(
        "--smart",
        action="store_true",
        help="Also request /.well-known/smart-configuration for the SMART rule",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall deadline in seconds for the probe",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from FHIRPROBE_LOG_LEVEL)")
    return parser


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    suffix_bytes = suffix.encode("utf-8")
    keep = max_bytes - len(suffix_bytes)
    if keep <= 0:
        return suffix_bytes[:max_bytes].decode("utf-8", errors="ignore")
    prefix = raw[:keep].decode("utf-8", errors="ignore")
    return prefix + suffix


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(payload, sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(assessment: dict[str, Any] | Any) -> None:
    payload = assessment.to_dict() if hasattr(assessment, "to_dict") else assessment
    if not isinstance(payload, dict):
        print(payload)
        return
    probe = payload.get("probe") or {}
    validation = payload.get("validation") or {}
    results = validation.get("results") or []

    print(f"[fhirprobe] {probe.get('url', '-')}")
    if probe.get("err"):
        print(f"Error: {_truncate_text_bytes(str(probe['err']), CLI_TEXT_TRUNCATION_BYTES)}")
    print(f"HTTP response: {probe.get('httpResponse')}")
    print(f"TLS version: {probe.get('tlsVersion')}")
    mime_types = probe.get("mimeTypes") or []
    print(f"MIME types: {', '.join(mime_types) if mime_types else '-'}")
    if not results:
        return

    failed = [r for r in results if isinstance(r, dict) and not r.get("valid")]
    print(f"Rules: {len(results) - len(failed)}/{len(results)} passed")
    for rule in results:
        if not isinstance(rule, dict):
            continue
        mark = "PASS" if rule.get("valid") else "FAIL"
        line = f"- [{mark}] {rule.get('ruleName')}: expected {rule.get('expected')!r}, got {rule.get('actual')!r}"
        print(line)
        if not rule.get("valid") and rule.get("comment"):
            print(f"    {rule['comment']}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings: HttpSettings = load_http_settings()
    if args.ignore_ssl_errors:
        settings = replace(settings, verify_ssl=False)

    http_client = create_default_http_client(settings)

    with FhirProbe(http_client=http_client, http_settings=settings) as probe:
        assessment = probe.assess(args.url, check_smart=args.smart, timeout=args.timeout)

    if args.json:
        _print_json(assessment)
    else:
        _pretty_print(assessment)

    return 0 if assessment.validation.passed and assessment.probe.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
