# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Capability statement acquisition.

Negotiation runs in two passes. The modern ``application/fhir+json`` type is
requested first; if that does not yield a 200 JSON response, the legacy
``application/json+fhir`` response becomes authoritative. If it does, the
legacy type is requested once more purely to record whether it is supported.
Servers that only speak the legacy type are therefore not misreported as
serving no JSON at all.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import CapabilityParseError, ProbeCancelledError, PublishError
from ..http.client import HttpClient
from ..http.models import HTTP_STATUS_NOT_ATTEMPTED, HttpRequest
from ..http.url import normalize_endpoint_url, smart_configuration_url
from ..models.probe import ProbeResult, QuerierArgs
from .fetch import FetchOutcome, bounded_request, fetch_with_content_type
from .mime import MimeType
from .statement import decode_capability_document

logger = logging.getLogger(__name__)


def _supported_mime_types(legacy: bool, modern: bool) -> tuple[str, ...]:
    supported: list[str] = []
    if legacy:
        supported.append(MimeType.FHIR2_LESS_JSON.value)
    if modern:
        supported.append(MimeType.FHIR3_PLUS_JSON.value)
    return tuple(supported)


def _failed(url: str, outcome: FetchOutcome, *, legacy: bool = False, modern: bool = False) -> ProbeResult:
    return ProbeResult(
        url=url,
        error=outcome.error,
        mime_types=_supported_mime_types(legacy, modern),
        tls_version=outcome.tls_version,
        http_status=outcome.http_status,
    )


def request_capability_statement(endpoint_url: str, client: HttpClient) -> ProbeResult:
    """
    Probe one FHIR endpoint and return its ProbeResult.

    Transport failures end negotiation and are reported on ``error``. A body that
    claimed to be JSON but does not parse raises CapabilityParseError, with the
    otherwise complete result attached.
    """
    url = normalize_endpoint_url(endpoint_url)
    if not url:
        return ProbeResult(url=endpoint_url, error=f"unable to create new GET request from URL: {endpoint_url!r}")
    request = HttpRequest(url=url, method="GET")

    authoritative = fetch_with_content_type(request, MimeType.FHIR3_PLUS_JSON, client)
    if not authoritative.ok:
        return _failed(endpoint_url, authoritative)
    supports_modern = authoritative.mime_matched

    if authoritative.http_status != 200 or not supports_modern:
        logger.debug(
            "%s did not serve %s; falling back to %s",
            url,
            MimeType.FHIR3_PLUS_JSON.value,
            MimeType.FHIR2_LESS_JSON.value,
        )
        authoritative = fetch_with_content_type(request, MimeType.FHIR2_LESS_JSON, client)
        if not authoritative.ok:
            return _failed(endpoint_url, authoritative, modern=supports_modern)
        supports_legacy = authoritative.mime_matched
    else:
        legacy_check = fetch_with_content_type(request, MimeType.FHIR2_LESS_JSON, client)
        if not legacy_check.ok:
            return _failed(endpoint_url, legacy_check, modern=supports_modern)
        supports_legacy = legacy_check.mime_matched

    result = ProbeResult(
        url=endpoint_url,
        mime_types=_supported_mime_types(supports_legacy, supports_modern),
        tls_version=authoritative.tls_version,
        http_status=authoritative.http_status,
    )
    if authoritative.body is None:
        return result

    document = decode_capability_document(authoritative.body, source=url, result=result)
    return replace(result, capability_statement=document)


def request_smart_configuration_status(endpoint_url: str, client: HttpClient) -> int:
    """
    Return the HTTP status of ``<base>/.well-known/smart-configuration``.

    0 means no response was received, which the SMART rule treats as not attempted.
    """
    url = smart_configuration_url(endpoint_url)
    if not url:
        return HTTP_STATUS_NOT_ATTEMPTED
    request = HttpRequest(url=url, method="GET", headers={"Accept": "application/json"})
    try:
        request = bounded_request(request)
    except ProbeCancelledError:
        return HTTP_STATUS_NOT_ATTEMPTED
    response = client.request(request)
    if not response.ok or response.status_code is None:
        logger.debug("SMART configuration request to %s failed: %s", url, response.error_message)
        return HTTP_STATUS_NOT_ATTEMPTED
    return response.status_code


def get_and_send_capability_statement(args: QuerierArgs) -> ProbeResult:
    """
    Probe ``args.fhir_url`` and publish the resulting message to ``args.queue_name``.

    Probe failures are recorded on the message rather than raised; only a publish
    failure propagates, as PublishError.
    """
    try:
        result = request_capability_statement(args.fhir_url, args.client)
    except CapabilityParseError as exc:
        partial = exc.result if isinstance(exc.result, ProbeResult) else ProbeResult(url=args.fhir_url)
        result = replace(partial, error=str(exc))

    if result.error:
        logger.warning("Got error:\n%s\n\nfrom URL: %s", result.error, args.fhir_url)

    message = result.to_json()
    try:
        args.publisher.send(args.queue_name, message)
    except Exception as exc:
        raise PublishError(
            f"error sending capability statement for FHIR endpoint {args.fhir_url} to queue '{args.queue_name}': {exc}"
        ) from exc
    return result


__all__ = [
    "get_and_send_capability_statement",
    "request_capability_statement",
    "request_smart_configuration_status",
]
