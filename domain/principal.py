"""
Domain: acting principal.

A Principal is the already-authenticated actor behind a request. The sales core
only ever sees an opaque id and a role; credentials never reach this layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from .errors import ValidationError


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SELLER = "seller"

    @staticmethod
    def parse(value: Any) -> "Role":
        """Resolve a Role from its wire value; unknown roles are rejected."""

        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            try:
                return Role(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError("Invalid role", field="role")


@dataclass(frozen=True, slots=True)
class Principal:
    principal_id: UUID
    role: Role

    @property
    def is_elevated(self) -> bool:
        """Admins and managers may see and change any sale."""

        return self.role in (Role.ADMIN, Role.MANAGER)

    def owns(self, owner_id: UUID) -> bool:
        return self.principal_id == owner_id
