# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Validator registry keyed by FHIR version, and the validation entry points."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from ..capability.tls import TLSVersion
from ..models.probe import ProbeResult
from ..models.report import ValidationReport
from .base import HTTP_NOT_ATTEMPTED, BaseValidation, ValidationInput, Validator, coerce_statement
from .r4 import R4Validation

logger = logging.getLogger(__name__)

ValidatorFactory = Callable[[], Validator]

_VALIDATORS: dict[str, ValidatorFactory] = {}
_DEFAULT_FACTORY: ValidatorFactory = BaseValidation


def register_validator(fhir_versions: Iterable[str], factory: ValidatorFactory) -> None:
    """Register ``factory`` as the validator for each of ``fhir_versions``."""
    for version in fhir_versions:
        _VALIDATORS[version.strip()] = factory


def registered_versions() -> list[str]:
    return sorted(_VALIDATORS)


def validator_for_version(fhir_version: str | None) -> Validator:
    """Return the validator for ``fhir_version``, falling back to the base rule set."""
    factory = _VALIDATORS.get((fhir_version or "").strip(), _DEFAULT_FACTORY)
    return factory()


register_validator(("4.0.0", "4.0.1"), R4Validation)


def run_validation(
    capability_statement: Any,
    http_status: int,
    mime_types: Iterable[str] | None,
    fhir_version: str | None,
    tls_version: TLSVersion | str | None,
    smart_http_status: int = HTTP_NOT_ATTEMPTED,
) -> ValidationReport:
    """
    Evaluate every rule registered for ``fhir_version`` and return the report.

    ``capability_statement`` may be a CapabilityStatement, a decoded JSON object
    or None; anything that is not a JSON object is treated as missing.
    """
    inputs = ValidationInput.build(
        capability_statement,
        http_status,
        mime_types,
        fhir_version,
        tls_version,
        smart_http_status,
    )
    validator = validator_for_version(inputs.fhir_version)
    logger.debug("Validating with %s for FHIR version %r", type(validator).__name__, inputs.fhir_version)
    return validator.run_validation(inputs)


def validate_probe_result(result: ProbeResult, smart_http_status: int = HTTP_NOT_ATTEMPTED) -> ValidationReport:
    """Validate a probe result, reading the FHIR version from its capability statement."""
    statement = coerce_statement(result.capability_statement)
    fhir_version = ""
    if statement is not None:
        version = statement.fhir_version()
        if version.present:
            fhir_version = version.value or ""
    return run_validation(
        statement,
        result.http_status,
        result.mime_types,
        fhir_version,
        result.tls_version,
        smart_http_status,
    )


__all__ = [
    "ValidatorFactory",
    "register_validator",
    "registered_versions",
    "run_validation",
    "validate_probe_result",
    "validator_for_version",
]
