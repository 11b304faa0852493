import re

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from devflow.devflow import OAuthProvider, User

USERNAME = re.compile(r"^[a-zA-Z0-9_]+$")
NAME = re.compile(r"^[a-zA-Z\s]+$")


class SignUpParams(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)

    @field_validator("name")
    @classmethod
    def name_letters_and_spaces(cls, v: str) -> str:
        if not NAME.match(v):
            raise ValueError("Name can only contain letters and spaces.")
        return v

    @field_validator("username")
    @classmethod
    def username_characters(cls, v: str) -> str:
        if not USERNAME.match(v):
            raise ValueError(
                "Username can only contain letters, numbers, and underscores."
            )
        return v.lower()

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only looks at the first 72 bytes.
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot exceed 72 bytes.")
        return v


class SignInParams(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.lower()


class OAuthUser(BaseModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=3)
    email: EmailStr
    image: HttpUrl | None = None

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.lower()


class SignInWithOAuthParams(BaseModel):
    provider: OAuthProvider
    provider_account_id: str = Field(min_length=1, alias="providerAccountId")
    user: OAuthUser

    model_config = {"populate_by_name": True}


class SignUpResult(BaseModel):
    user: User
    session_established: bool
