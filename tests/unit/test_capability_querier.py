# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import threading

import pytest

from fhirprobe.capability import MimeType, TLSVersion, fetch_with_content_type
from fhirprobe.capability.querier import (
    get_and_send_capability_statement,
    request_capability_statement,
    request_smart_configuration_status,
)
from fhirprobe.errors import CapabilityParseError, ConfigError, PublishError
from fhirprobe.http import HttpRequest, HttpResponse, StubHttpClient
from fhirprobe.models import HTTP_STATUS_TRANSPORT_FAILURE, ProbeResult, QuerierArgs
from fhirprobe.utils.context import probe_context

BASE = "https://fhir.example/r4"
METADATA = BASE + "/metadata"
MODERN = MimeType.FHIR3_PLUS_JSON.value
LEGACY = MimeType.FHIR2_LESS_JSON.value

STATEMENT = {"resourceType": "CapabilityStatement", "kind": "instance", "fhirVersion": "4.0.1"}


def _json_response(content_type, body=STATEMENT, status=200, tls="TLSv1.3"):
    return HttpResponse(
        ok=True,
        status_code=status,
        headers={"Content-Type": content_type},
        content=json.dumps(body).encode(),
        tls_version=tls,
    )


def _xml_response(status=200, tls="TLSv1.3"):
    return HttpResponse(
        ok=True,
        status_code=status,
        headers={"Content-Type": "application/fhir+xml"},
        content=b"<CapabilityStatement/>",
        tls_version=tls,
    )


class RecordingPublisher:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, queue_name, message):
        if self.fail:
            raise RuntimeError("broker unavailable")
        self.sent.append((queue_name, message))


def test_fetch_sets_accept_and_reports_match():
    stub = StubHttpClient()
    stub.add(METADATA, _json_response("application/fhir+json; charset=utf-8"), accept=MODERN)

    outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)

    assert outcome.ok
    assert outcome.http_status == 200
    assert outcome.tls_version is TLSVersion.TLS_1_3
    assert outcome.mime_matched
    assert json.loads(outcome.body) == STATEMENT
    assert stub.requests[0].headers == {"Accept": MODERN}


def test_fetch_non_200_is_data_not_error():
    stub = StubHttpClient({METADATA: _json_response(MODERN, status=406, tls="TLSv1.2")})

    outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)

    assert outcome.ok
    assert outcome.http_status == 406
    assert outcome.tls_version is TLSVersion.TLS_1_2
    assert not outcome.mime_matched
    assert outcome.body is None


def test_fetch_xml_answer_does_not_match():
    stub = StubHttpClient({METADATA: _xml_response()})
    outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)
    assert outcome.http_status == 200
    assert not outcome.mime_matched


def test_fetch_transport_failure():
    stub = StubHttpClient({METADATA: HttpResponse(ok=False, error_message="connection refused")})

    outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)

    assert not outcome.ok
    assert outcome.http_status == HTTP_STATUS_TRANSPORT_FAILURE
    assert outcome.tls_version is TLSVersion.UNKNOWN
    assert "connection refused" in outcome.error
    assert METADATA in outcome.error


def test_fetch_oversized_body_is_reported_with_the_limit():
    clipped = HttpResponse(
        ok=True,
        status_code=200,
        headers={"Content-Type": MODERN},
        content=b'{"resourceType": "Capab',
        tls_version="TLSv1.3",
        meta={"body_truncated": True, "body_bytes_limit": 100},
    )
    stub = StubHttpClient({METADATA: clipped})

    outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)

    assert not outcome.ok
    assert outcome.http_status == HTTP_STATUS_TRANSPORT_FAILURE
    assert "100 byte limit" in outcome.error
    assert METADATA in outcome.error


def test_fetch_respects_cancelled_context():
    stub = StubHttpClient({METADATA: _json_response(MODERN)})
    cancel = threading.Event()
    cancel.set()

    with probe_context(cancel_event=cancel):
        outcome = fetch_with_content_type(HttpRequest(url=METADATA), MimeType.FHIR3_PLUS_JSON, stub)

    assert not outcome.ok
    assert "context canceled" in outcome.error
    assert stub.requests == []


def test_fetch_bounds_timeout_by_deadline():
    stub = StubHttpClient({METADATA: _json_response(MODERN)})

    with probe_context(timeout=5.0):
        fetch_with_content_type(HttpRequest(url=METADATA, timeout=60.0), MimeType.FHIR3_PLUS_JSON, stub)

    sent_timeout = stub.requests[0].timeout
    assert sent_timeout is not None
    assert 0 < sent_timeout <= 5.0


def test_modern_server_also_checked_for_legacy_support():
    stub = StubHttpClient()
    stub.add(METADATA, _json_response(MODERN), accept=MODERN)
    stub.add(METADATA, _json_response(LEGACY, body={"ignored": True}), accept=LEGACY)

    result = request_capability_statement(BASE, stub)

    assert result.ok
    assert result.url == BASE
    assert result.http_status == 200
    assert result.tls_version is TLSVersion.TLS_1_3
    assert result.mime_types == (LEGACY, MODERN)
    assert result.capability_statement == STATEMENT
    assert [r.headers["Accept"] for r in stub.requests] == [MODERN, LEGACY]
    assert all(r.url == METADATA for r in stub.requests)


def test_modern_only_server():
    stub = StubHttpClient()
    stub.add(METADATA, _json_response(MODERN), accept=MODERN)
    stub.add(METADATA, _xml_response(), accept=LEGACY)

    result = request_capability_statement(METADATA, stub)

    assert result.mime_types == (MODERN,)
    assert result.capability_statement == STATEMENT


def test_legacy_only_server_uses_legacy_response():
    legacy_doc = {"kind": "instance", "fhirVersion": "1.0.2"}
    stub = StubHttpClient()
    stub.add(METADATA, _xml_response(status=406, tls="TLSv1.2"), accept=MODERN)
    stub.add(METADATA, _json_response(LEGACY, body=legacy_doc, tls="TLSv1.2"), accept=LEGACY)

    result = request_capability_statement(BASE, stub)

    assert result.ok
    assert result.http_status == 200
    assert result.mime_types == (LEGACY,)
    assert result.capability_statement == legacy_doc
    assert len(stub.requests) == 2


def test_xml_only_server_has_no_document():
    stub = StubHttpClient({METADATA: _xml_response(tls="TLSv1.2")})

    result = request_capability_statement(BASE, stub)

    assert result.ok
    assert result.http_status == 200
    assert result.mime_types == ()
    assert result.tls_version is TLSVersion.TLS_1_2
    assert result.capability_statement is None


def test_plain_http_endpoint_reports_no_tls():
    stub = StubHttpClient({"http://fhir.example/metadata": _json_response(MODERN, tls=None)})
    result = request_capability_statement("http://fhir.example", stub)
    assert result.tls_version is TLSVersion.NO_TLS


def test_transport_failure_on_first_pass():
    stub = StubHttpClient()

    result = request_capability_statement(BASE, stub)

    assert not result.ok
    assert result.http_status == HTTP_STATUS_TRANSPORT_FAILURE
    assert result.tls_version is TLSVersion.UNKNOWN
    assert result.mime_types == ()
    assert result.capability_statement is None
    assert len(stub.requests) == 1


def test_transport_failure_on_second_pass_keeps_confirmed_types():
    stub = StubHttpClient()
    stub.add(METADATA, _json_response(MODERN), accept=MODERN)
    stub.add(METADATA, HttpResponse(ok=False, error_message="reset by peer"), accept=LEGACY)

    result = request_capability_statement(BASE, stub)

    assert "reset by peer" in result.error
    assert result.mime_types == (MODERN,)
    assert result.http_status == HTTP_STATUS_TRANSPORT_FAILURE
    assert result.capability_statement is None


def test_invalid_json_body_raises_with_partial_result():
    bad = HttpResponse(ok=True, status_code=200, headers={"Content-Type": MODERN}, content=b"{oops", tls_version="TLSv1.2")
    stub = StubHttpClient()
    stub.add(METADATA, bad, accept=MODERN)
    stub.add(METADATA, _xml_response(), accept=LEGACY)

    with pytest.raises(CapabilityParseError) as excinfo:
        request_capability_statement(BASE, stub)

    assert str(excinfo.value).startswith(f"unable to parse the capability statement returned by {METADATA}")
    partial = excinfo.value.result
    assert isinstance(partial, ProbeResult)
    assert partial.http_status == 200
    assert partial.mime_types == (MODERN,)
    assert partial.tls_version is TLSVersion.TLS_1_2


def test_empty_url_is_reported_not_raised():
    stub = StubHttpClient()
    result = request_capability_statement("   ", stub)
    assert result.error
    assert stub.requests == []


def test_expired_deadline_aborts_probe():
    stub = StubHttpClient({METADATA: _json_response(MODERN)})

    with probe_context(timeout=0):
        result = request_capability_statement(BASE, stub)

    assert "deadline exceeded" in result.error
    assert stub.requests == []


def test_smart_configuration_status():
    stub = StubHttpClient({BASE + "/.well-known/smart-configuration": HttpResponse(ok=True, status_code=404)})

    assert request_smart_configuration_status(METADATA, stub) == 404
    assert request_smart_configuration_status("https://other.example", stub) == 0
    assert stub.requests[0].url == BASE + "/.well-known/smart-configuration"


def test_get_and_send_publishes_message():
    stub = StubHttpClient({METADATA: _json_response(MODERN)})
    publisher = RecordingPublisher()

    result = get_and_send_capability_statement(
        QuerierArgs(fhir_url=BASE, client=stub, publisher=publisher, queue_name="capabilities")
    )

    assert result.ok
    queue, message = publisher.sent[0]
    assert queue == "capabilities"
    payload = json.loads(message)
    assert payload["url"] == BASE
    assert payload["err"] == ""
    assert payload["httpResponse"] == 200
    assert payload["tlsVersion"] == "TLS 1.3"
    assert payload["mimeTypes"] == [LEGACY, MODERN]
    assert payload["capabilityStatement"] == STATEMENT


def test_get_and_send_publishes_failures_too(caplog):
    publisher = RecordingPublisher()

    with caplog.at_level("WARNING"):
        result = get_and_send_capability_statement(
            QuerierArgs(fhir_url=BASE, client=StubHttpClient(), publisher=publisher, queue_name="q")
        )

    assert not result.ok
    payload = json.loads(publisher.sent[0][1])
    assert payload["httpResponse"] == -1
    assert payload["tlsVersion"] == "TLS version unknown"
    assert payload["err"]
    assert "from URL: " + BASE in caplog.text


def test_get_and_send_publishes_parse_failure():
    bad = HttpResponse(ok=True, status_code=200, headers={"Content-Type": MODERN}, content=b"nope")
    publisher = RecordingPublisher()

    result = get_and_send_capability_statement(
        QuerierArgs(fhir_url=BASE, client=StubHttpClient({METADATA: bad}), publisher=publisher, queue_name="q")
    )

    assert "unable to parse" in result.error
    payload = json.loads(publisher.sent[0][1])
    assert payload["httpResponse"] == 200
    assert payload["capabilityStatement"] is None


def test_get_and_send_wraps_publish_failure():
    stub = StubHttpClient({METADATA: _json_response(MODERN)})

    with pytest.raises(PublishError) as excinfo:
        get_and_send_capability_statement(
            QuerierArgs(fhir_url=BASE, client=stub, publisher=RecordingPublisher(fail=True), queue_name="q")
        )

    assert "queue 'q'" in str(excinfo.value)
    assert "broker unavailable" in str(excinfo.value)


@pytest.mark.parametrize(
    "overrides",
    [
        {"fhir_url": ""},
        {"queue_name": " "},
        {"client": object()},
        {"publisher": object()},
    ],
)
def test_querier_args_validation(overrides):
    fields = {"fhir_url": BASE, "client": StubHttpClient(), "publisher": RecordingPublisher(), "queue_name": "q"}
    fields.update(overrides)
    with pytest.raises(ConfigError):
        QuerierArgs(**fields)
