from .code_store import CodeStore
from .dto import CodeDispatch, CodePolicy, CodePurpose, CodeType
from .rate_limiter import RateLimiter
from .service import VerificationCodeService

__all__ = [
    "CodeDispatch",
    "CodePolicy",
    "CodePurpose",
    "CodeStore",
    "CodeType",
    "RateLimiter",
    "VerificationCodeService",
]
