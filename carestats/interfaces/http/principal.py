# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Hand-off of the already authenticated caller into request scope.

Authentication happens upstream. By default the principal is read from the
``X-Principal-Id`` and ``X-Principal-Role`` headers set by the gateway; an
application may install its own resolver instead.
"""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask, Request, g, request

from carestats.domain import Principal
from carestats.shared.errors import PrincipalRequiredError

PRINCIPAL_ID_HEADER = "X-Principal-Id"
PRINCIPAL_ROLE_HEADER = "X-Principal-Role"

PrincipalResolver = Callable[[Request], Principal | None]


def principal_from_headers(req: Request) -> Principal | None:
    principal_id = (req.headers.get(PRINCIPAL_ID_HEADER) or "").strip()
    role = (req.headers.get(PRINCIPAL_ROLE_HEADER) or "").strip().lower()
    if not principal_id or not role:
        return None
    return Principal(id=principal_id, role=role)


def configure_principal_resolution(
    app: Flask, resolver: PrincipalResolver | None = None
) -> None:
    resolve = resolver or principal_from_headers

    @app.before_request
    def _resolve_principal() -> None:
        g.principal = resolve(request)


def current_principal() -> Principal:
    principal = getattr(g, "principal", None)
    if principal is None:
        raise PrincipalRequiredError()
    return principal


__all__ = [
    "PRINCIPAL_ID_HEADER",
    "PRINCIPAL_ROLE_HEADER",
    "PrincipalResolver",
    "configure_principal_resolution",
    "current_principal",
    "principal_from_headers",
]
