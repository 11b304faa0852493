from . import tables
from .schemas import (
    OAuthUser,
    SignInParams,
    SignInWithOAuthParams,
    SignUpParams,
    SignUpResult,
)
from .service import (
    EstablishSession,
    get_account_by_provider,
    sign_in_with_credentials,
    sign_in_with_oauth,
    sign_up_with_credentials,
)

__all__ = [
    "tables",
    "EstablishSession",
    "OAuthUser",
    "SignInParams",
    "SignInWithOAuthParams",
    "SignUpParams",
    "SignUpResult",
    "get_account_by_provider",
    "sign_in_with_credentials",
    "sign_in_with_oauth",
    "sign_up_with_credentials",
]
