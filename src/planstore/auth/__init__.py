"""Identity context and startup identity resolution."""

from planstore.auth.base import IdentityResolver
from planstore.auth.context import IdentityContext
from planstore.auth.factory import create_identity_resolver

__all__ = ["IdentityContext", "IdentityResolver", "create_identity_resolver"]
