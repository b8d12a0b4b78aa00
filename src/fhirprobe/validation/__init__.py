# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Capability statement validation against implementation guide rule sets."""

from .base import BaseValidation, ValidationInput, Validator
from .r4 import R4Validation
from .registry import (
    register_validator,
    registered_versions,
    run_validation,
    validate_probe_result,
    validator_for_version,
)
from .resources import US_CORE_PROFILES, check_resource_list

__all__ = [
    "BaseValidation",
    "R4Validation",
    "US_CORE_PROFILES",
    "ValidationInput",
    "Validator",
    "check_resource_list",
    "register_validator",
    "registered_versions",
    "run_validation",
    "validate_probe_result",
    "validator_for_version",
]
