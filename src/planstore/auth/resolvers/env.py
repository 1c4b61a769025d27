"""Environment identity resolver."""

from __future__ import annotations

import os

from planstore.auth.base import IdentityResolver
from planstore.contracts.exceptions import AuthenticationError
from planstore.contracts.identity import SessionIdentity

USER_ID_ENV = "PLANSTORE_USER_ID"


class EnvIdentityResolver(IdentityResolver):
    async def resolve(self) -> SessionIdentity:
        user_id = (os.getenv(USER_ID_ENV) or "").strip()
        if not user_id:
            raise AuthenticationError(f"{USER_ID_ENV} is not set or empty")
        return SessionIdentity(user_id=user_id, authenticated=True)
