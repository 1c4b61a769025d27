"""Session identity contracts."""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from planstore.contracts.project import ANONYMOUS_USER_ID


class SessionIdentity(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(default=ANONYMOUS_USER_ID, alias="userId")
    authenticated: bool = False

    @classmethod
    def anonymous(cls) -> SessionIdentity:
        return cls()


IdentityObserver = Callable[[SessionIdentity], None]
