# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DashboardStatsResponseDTO(BaseModel):
    success: bool = True
    stats: dict[str, int] = Field(default_factory=dict)
    cache: bool | None = None

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class HealthTrendDTO(BaseModel):
    date: datetime
    severity: str
    confidence: float
    accuracy: float | None
    diagnosis_count: int

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        validate_by_name=True,
    )


class HealthTrendsResponseDTO(BaseModel):
    success: bool = True
    trends: list[HealthTrendDTO]

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
