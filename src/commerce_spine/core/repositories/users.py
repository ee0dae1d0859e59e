"""User repository - ``app_users``."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from commerce_spine.core.orm.base import to_dict
from commerce_spine.core.orm.tables import UserTable
from commerce_spine.core.relations import Relations, RelationLadder

from .base import RelationalRepository

USER_LADDER = RelationLadder("user", [])


class UserRepository(RelationalRepository[UserTable]):
    """CRUD for users. Reads never expand orders."""

    model = UserTable
    entity = "user"
    ladder = USER_LADDER

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        def read(session: Session, relations: Relations) -> dict[str, Any] | None:
            obj = session.scalars(select(UserTable).where(UserTable.email == email)).first()
            return to_dict(obj) if obj is not None else None

        return self._resolver.resolve(self.ladder, read).value
