# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from carestats.domain import Role

_CAMEL = ConfigDict(alias_generator=to_camel, validate_by_name=True)
_NON_NULLABLE = ("name", "role", "is_active")


class UserListQueryDTO(BaseModel):
    role: Role | None = None
    search: str | None = Field(None, max_length=128)

    model_config = ConfigDict(use_enum_values=True)


class UserDTO(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime
    phone: str | None = None
    date_of_birth: datetime | None = None
    address: str | None = None
    specialization: str | None = None
    license_number: str | None = None
    blood_group: str | None = None
    emergency_contact: dict[str, Any] | None = None
    is_active: bool = True

    model_config = ConfigDict(**_CAMEL, from_attributes=True)


class UserUpdateDTO(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    phone: str | None = Field(None, max_length=32)
    date_of_birth: datetime | None = None
    address: str | None = Field(None, max_length=512)
    specialization: str | None = Field(None, max_length=128)
    license_number: str | None = Field(None, max_length=64)
    blood_group: str | None = Field(None, max_length=8)
    emergency_contact: dict[str, Any] | None = None
    is_active: bool | None = None
    role: Role | None = None

    model_config = ConfigDict(**_CAMEL, extra="forbid", use_enum_values=True)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> UserUpdateDTO:
        for name in _NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    @classmethod
    def accepted_keys(cls) -> frozenset[str]:
        keys: set[str] = set()
        for name, field in cls.model_fields.items():
            keys.add(name)
            if field.alias:
                keys.add(field.alias)
        return frozenset(keys)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UserResponseDTO(BaseModel):
    success: bool = True
    user: UserDTO

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class UserListResponseDTO(BaseModel):
    success: bool = True
    count: int
    users: list[UserDTO]

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
