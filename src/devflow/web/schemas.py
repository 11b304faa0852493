from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ActionResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None


class ErrorDetail(BaseModel):
    message: str
    field_errors: dict[str, list[str]] | None = Field(
        default=None, serialization_alias="fieldErrors"
    )


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail


class SignUpData(BaseModel):
    login_required: bool = Field(serialization_alias="loginRequired")


class AccountData(BaseModel):
    user_id: int = Field(serialization_alias="userId")
    provider: str
    provider_account_id: str = Field(serialization_alias="providerAccountId")
