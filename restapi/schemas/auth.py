import re

from pydantic import BaseModel, Field, ValidationInfo, field_validator

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_email_format(v: str) -> str:
    if not EMAIL_RE.match(v):
        raise ValueError("Please enter a valid email address.")
    return v


class LoginBody(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return validate_email_format(v)


class SignupBody(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)
    confirm_password: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v.isascii() or not v.isalpha():
            raise ValueError("This field may only contain letters.")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return validate_email_format(v)

    @field_validator("confirm_password")
    @classmethod
    def validate_confirm_password(cls, v: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own validation
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("Must be equal to password.")
        return v


class TokenResponse(BaseModel):
    message: str
    token: str
