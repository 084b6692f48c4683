# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask, Response
from flask_cors import CORS

from carestats.infrastructure.container import Container
from carestats.interfaces.http.principal import (
    PrincipalResolver,
    configure_principal_resolution,
)
from carestats.shared.logging import logger, setup_logging
from carestats.shared.middleware.error_handler import configure_error_handling
from carestats.shared.middleware.request_logger import configure_request_logging


def create_app(
    container: Container | None = None,
    principal_resolver: PrincipalResolver | None = None,
) -> Flask:
    container = container or Container()
    config = container.config
    setup_logging(config.log_level, structured=config.is_production())

    app = Flask(__name__)
    app.extensions["carestats.container"] = container

    configure_error_handling(app, config)
    configure_principal_resolution(app, principal_resolver)
    configure_request_logging(app, config)

    cors_kwargs: dict[str, object] = {"resources": {r"/api/*": {"origins": config.allowed_origins}}}
    if any(origin != "*" for origin in config.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.stats_controller.as_blueprint())
    app.register_blueprint(container.users_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp: Response) -> Response:
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        return resp

    logger.info(
        f"Flask app initialized env={config.app_env} backend={config.storage.backend} "
        f"breakdown={container.role_breakdown.mode}"
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
