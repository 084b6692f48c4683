# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify

from carestats.application.use_cases.analytics.get_health_trends import (
    GetHealthTrendsUseCase,
)
from carestats.application.use_cases.stats.get_dashboard_stats import (
    GetDashboardStatsUseCase,
)
from carestats.interfaces.http.dto.stats import (
    DashboardStatsResponseDTO,
    HealthTrendDTO,
    HealthTrendsResponseDTO,
)
from carestats.interfaces.http.principal import current_principal
from carestats.shared.logging import logger
from carestats.utils.asyncio_utils import run_async


class StatsController:
    def __init__(
        self,
        *,
        dashboard_stats_use_case: GetDashboardStatsUseCase,
        health_trends_use_case: GetHealthTrendsUseCase,
    ) -> None:
        self._dashboard_stats = dashboard_stats_use_case
        self._health_trends = health_trends_use_case

    def dashboard_stats(self) -> tuple[Response, int]:
        principal = current_principal()
        debug_mode = getattr(g, "debug_mode", False)

        if debug_mode:
            logger.info(f"stats.dashboard called by user={principal.id} role={principal.role}")

        try:
            result = run_async(self._dashboard_stats.execute(principal))
        except Exception as exc:
            if debug_mode:
                logger.exception(f"stats.dashboard failed for user={principal.id}: {exc}")
            else:
                logger.error(f"stats.dashboard failed: {type(exc).__name__}")
            raise

        response = DashboardStatsResponseDTO(
            stats=result.to_dict(),
            cache=True if result.from_cache else None,
        )
        logger.info(
            f"stats.dashboard: ok role={principal.role} cache={'hit' if result.from_cache else 'miss'}"
        )
        return jsonify(response.to_payload()), 200

    def health_trends(self) -> tuple[Response, int]:
        principal = current_principal()
        debug_mode = getattr(g, "debug_mode", False)

        try:
            points = run_async(self._health_trends.execute(principal))
        except Exception as exc:
            if debug_mode:
                logger.exception(f"stats.health_trends failed for user={principal.id}: {exc}")
            else:
                logger.error(f"stats.health_trends failed: {type(exc).__name__}")
            raise

        response = HealthTrendsResponseDTO(
            trends=[HealthTrendDTO.model_validate(point) for point in points]
        )
        if debug_mode:
            logger.info(f"stats.health_trends: {len(points)} points for user={principal.id}")
        return jsonify(response.to_payload()), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")
        bp.add_url_rule("/stats", view_func=self.dashboard_stats, methods=["GET"])
        bp.add_url_rule("/health-trends", view_func=self.health_trends, methods=["GET"])
        return bp


__all__ = ["StatsController"]
