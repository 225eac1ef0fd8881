from .dto import TokenPair, TokenPolicy
from .revocation import RevocationRegistry
from .service import TokenService
from .sessions import SessionStore

__all__ = ["TokenPair", "TokenPolicy", "RevocationRegistry", "SessionStore", "TokenService"]
