"""Identity resolver implementations."""

from planstore.auth.resolvers.env import USER_ID_ENV, EnvIdentityResolver
from planstore.auth.resolvers.static import AnonymousIdentityResolver, StaticIdentityResolver
from planstore.auth.resolvers.stored import StoredIdentityResolver

__all__ = [
    "USER_ID_ENV",
    "AnonymousIdentityResolver",
    "EnvIdentityResolver",
    "StaticIdentityResolver",
    "StoredIdentityResolver",
]
