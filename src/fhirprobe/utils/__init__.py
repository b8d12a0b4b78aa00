# SPDX-FileCopyrightText: 2025 fhirprobe contributors
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Utility helpers. The ambient probe context lives in ``fhirprobe.utils.context``."""
