# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import (
    AnalysisCollection,
    AppointmentCollection,
    Filter,
    GroupedUserCollection,
    ReportCollection,
    RoleBreakdownStrategy,
    StatsCachePort,
    UserCollection,
)

__all__ = [
    "AnalysisCollection",
    "AppointmentCollection",
    "Filter",
    "GroupedUserCollection",
    "ReportCollection",
    "RoleBreakdownStrategy",
    "StatsCachePort",
    "UserCollection",
]
