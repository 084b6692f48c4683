# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from carestats.application.use_cases.users.delete_user import DeleteUserUseCase
from carestats.application.use_cases.users.get_user import GetUserUseCase
from carestats.application.use_cases.users.list_users import ListUsersUseCase
from carestats.application.use_cases.users.update_user import UpdateUserUseCase
from carestats.domain import InvalidUserUpdateError
from carestats.interfaces.http.dto.users import (
    UserDTO,
    UserListQueryDTO,
    UserListResponseDTO,
    UserResponseDTO,
    UserUpdateDTO,
)
from carestats.interfaces.http.principal import current_principal
from carestats.shared.errors.validation import raise_validation_error
from carestats.shared.logging import logger
from carestats.utils.asyncio_utils import run_async


class UsersController:
    def __init__(
        self,
        *,
        list_use_case: ListUsersUseCase,
        get_use_case: GetUserUseCase,
        update_use_case: UpdateUserUseCase,
        delete_use_case: DeleteUserUseCase,
    ) -> None:
        self._list = list_use_case
        self._get = get_use_case
        self._update = update_use_case
        self._delete = delete_use_case

    def list_users(self) -> tuple[Response, int]:
        principal = current_principal()
        debug_mode = getattr(g, "debug_mode", False)

        try:
            query = UserListQueryDTO.model_validate(
                {
                    "role": request.args.get("role") or None,
                    "search": request.args.get("search") or None,
                }
            )
        except ValidationError as exc:
            if debug_mode:
                logger.warning(f"users.list validation error for user={principal.id}: {exc}")
            raise_validation_error(exc)

        users = run_async(self._list.execute(role=query.role, search=query.search))
        response = UserListResponseDTO(
            count=len(users),
            users=[UserDTO.model_validate(user) for user in users],
        )
        if debug_mode:
            logger.info(f"users.list: {len(users)} users for user={principal.id}")
        return jsonify(response.to_payload()), 200

    def get_user(self, user_id: str) -> tuple[Response, int]:
        current_principal()
        user = run_async(self._get.execute(user_id))
        return jsonify(UserResponseDTO(user=UserDTO.model_validate(user)).to_payload()), 200

    def update_user(self, user_id: str) -> tuple[Response, int]:
        principal = current_principal()
        debug_mode = getattr(g, "debug_mode", False)

        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        unknown = sorted(set(payload) - UserUpdateDTO.accepted_keys())
        if unknown:
            raise InvalidUserUpdateError(context={"fields": unknown})

        try:
            dto = UserUpdateDTO.model_validate(payload)
        except ValidationError as exc:
            if debug_mode:
                logger.warning(f"users.update validation error for user={principal.id}: {exc}")
            raise_validation_error(exc)

        user = run_async(self._update.execute(user_id, dto.changes()))
        return jsonify(UserResponseDTO(user=UserDTO.model_validate(user)).to_payload()), 200

    def delete_user(self, user_id: str) -> tuple[Response, int]:
        principal = current_principal()
        run_async(self._delete.execute(user_id, requester=principal))
        return jsonify({"success": True, "message": "User deleted"}), 200

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("users", __name__, url_prefix="/api/users")
        bp.add_url_rule("", view_func=self.list_users, methods=["GET"])
        bp.add_url_rule("/<user_id>", view_func=self.get_user, methods=["GET"])
        bp.add_url_rule("/<user_id>", view_func=self.update_user, methods=["PATCH"])
        bp.add_url_rule("/<user_id>", view_func=self.delete_user, methods=["DELETE"])
        return bp


__all__ = ["UsersController"]
