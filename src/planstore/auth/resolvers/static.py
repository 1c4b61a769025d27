"""Static identity resolvers."""

from __future__ import annotations

from dataclasses import dataclass

from planstore.auth.base import IdentityResolver
from planstore.contracts.exceptions import AuthenticationError
from planstore.contracts.identity import SessionIdentity


@dataclass(frozen=True)
class StaticIdentityResolver(IdentityResolver):
    user_id: str

    async def resolve(self) -> SessionIdentity:
        resolved = self.user_id.strip()
        if not resolved:
            raise AuthenticationError("Static user id is empty")
        return SessionIdentity(user_id=resolved, authenticated=True)


class AnonymousIdentityResolver(IdentityResolver):
    async def resolve(self) -> SessionIdentity:
        return SessionIdentity.anonymous()
