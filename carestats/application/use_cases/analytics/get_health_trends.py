# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from carestats.domain import HealthTrendPoint, Principal, Role

from ...interfaces import AnalysisCollection


class GetHealthTrendsUseCase:
    def __init__(self, *, analyses: AnalysisCollection) -> None:
        self._analyses = analyses

    async def execute(self, principal: Principal) -> list[HealthTrendPoint]:
        if principal.role == Role.ADMIN:
            analyses = await self._analyses.find({})
        else:
            analyses = await self._analyses.find({"patient_id": principal.id})

        analyses.sort(key=lambda analysis: analysis.created_at)
        return [HealthTrendPoint.from_analysis(analysis) for analysis in analyses]


__all__ = ["GetHealthTrendsUseCase"]
