from . import tables
from .schemas import ProfileUpdate
from .service import get_user_by_id, profile_delta, unique_username

__all__ = [
    "tables",
    "ProfileUpdate",
    "get_user_by_id",
    "profile_delta",
    "unique_username",
]
