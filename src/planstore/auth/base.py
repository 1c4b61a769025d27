"""Identity resolver interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod

from planstore.contracts.identity import SessionIdentity


class IdentityResolver(ABC):
    @abstractmethod
    async def resolve(self) -> SessionIdentity:
        """Resolve the identity to apply at startup."""
