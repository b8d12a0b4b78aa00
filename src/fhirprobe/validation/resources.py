# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Rules that walk every REST block's resource list."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..capability.statement import CapabilityStatement
from ..models.report import Rule, RuleName

US_CORE_PROFILES = (
    "AllergyIntolerance",
    "CarePlan",
    "CareTeam",
    "Condition",
    "DiagnosticReport",
    "DocumentReference",
    "Encounter",
    "Goal",
    "Immunization",
    "Device",
    "Observation",
    "Location",
    "Medication",
    "MedicationRequest",
    "Organization",
    "Practitioner",
    "PractitionerRole",
    "Procedure",
    "Provenance",
)

MISSING_STATEMENT_COMMENT = "The Capability Statement does not exist; cannot check resource profiles. "
MISSING_REST_COMMENT = "Rest field does not exist. "
MISSING_RESOURCES_COMMENT = "The Resource Profiles do not exist. "
MALFORMED_RESOURCE_COMMENT = "The Resource Profiles are not properly formatted. "

RESOURCE_LIST_RULES = frozenset(
    {
        RuleName.PATIENT_RESOURCE_EXISTS,
        RuleName.OTHER_RESOURCE_EXISTS,
        RuleName.UNIQUE_RESOURCES,
        RuleName.SEARCH_PARAMS_UNIQUE,
    }
)


class SearchParamFormatError(ValueError):
    """A resource's searchParam list is not a list of objects with string names."""


def search_params_unique(resource: Mapping[str, Any]) -> bool:
    """
    Return whether the resource's searchParam names are unique.

    A resource without ``searchParam`` passes. Raises SearchParamFormatError when
    the list or one of its entries is malformed.
    """
    search = resource.get("searchParam")
    if search is None:
        return True
    if not isinstance(search, list):
        raise SearchParamFormatError("unable to read searchParam value in a resource as a list")
    seen: set[str] = set()
    for entry in search:
        if not isinstance(entry, Mapping):
            raise SearchParamFormatError("element of searchParam list is not an object")
        name = entry.get("name")
        if name is None:
            raise SearchParamFormatError("name does not exist but is required in searchParam values")
        if not isinstance(name, str):
            raise SearchParamFormatError("the name of a searchParam is not a string")
        if name in seen:
            return False
        seen.add(name)
    return True


def check_resource_list(
    capability_statement: CapabilityStatement | None,
    rule_name: RuleName,
    implementation_guide: str,
) -> Rule:
    """
    Evaluate one resource-list rule across every REST block.

    Structural problems (missing statement, rest, resource list or resource type)
    end the walk for this rule. The returned comment carries only the finding;
    callers append the rule's normative text.
    """
    if rule_name not in RESOURCE_LIST_RULES:
        raise ValueError(f"{rule_name.value} is not a resource-list rule")

    rule = Rule(
        name=rule_name,
        expected="true",
        actual="true",
        implementation_guide=implementation_guide,
    )

    if capability_statement is None:
        return rule.failed(MISSING_STATEMENT_COMMENT)

    rest = capability_statement.rest()
    if not rest.present:
        return rule.failed(MISSING_REST_COMMENT)

    seen_types: set[str] = set()
    for rest_entry in rest.value or []:
        resources = capability_statement.resource_list(rest_entry)
        if not resources.non_empty():
            return rule.failed(MISSING_RESOURCES_COMMENT)
        for resource in resources.value or []:
            type_name = resource.get("type")
            if not isinstance(type_name, str):
                return rule.failed(MALFORMED_RESOURCE_COMMENT)

            if rule_name is RuleName.PATIENT_RESOURCE_EXISTS:
                if type_name == "Patient":
                    return rule
            elif rule_name is RuleName.OTHER_RESOURCE_EXISTS:
                if type_name in US_CORE_PROFILES:
                    return rule
            elif rule_name is RuleName.UNIQUE_RESOURCES:
                if type_name in seen_types:
                    return rule.failed(f"The resource type {type_name} is not unique. ")
                seen_types.add(type_name)
            else:
                try:
                    unique = search_params_unique(resource)
                except SearchParamFormatError:
                    rule = rule.failed(rule.comment + f"The resource type {type_name} is not formatted properly. ")
                else:
                    if not unique:
                        rule = rule.failed(rule.comment + f"The resource type {type_name} does not have unique searchParams. ")

    if rule_name in (RuleName.UNIQUE_RESOURCES, RuleName.SEARCH_PARAMS_UNIQUE):
        return rule
    return rule.failed("")


__all__ = [
    "MALFORMED_RESOURCE_COMMENT",
    "MISSING_RESOURCES_COMMENT",
    "MISSING_REST_COMMENT",
    "MISSING_STATEMENT_COMMENT",
    "US_CORE_PROFILES",
    "SearchParamFormatError",
    "check_resource_list",
    "search_params_unique",
]
