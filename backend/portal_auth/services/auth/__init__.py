from .dto import AccessTokenOut, CodeLoginIn, LogoutIn, RefreshIn, SendCodeIn
from .service import AuthService

__all__ = ["AuthService", "AccessTokenOut", "CodeLoginIn", "LogoutIn", "RefreshIn", "SendCodeIn"]
