from typing import List, Optional

from pydantic import BaseModel, EmailStr, ValidationError, ValidationInfo, constr, field_validator

NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 40
MICROPOST_MAX_LENGTH = 140


class ValidationResult(BaseModel):
    loc: str
    msg: str


def _required(value, message: str):
    if value is None or not str(value).strip():
        raise ValueError(message)
    return value


def _normalize_email(value):
    return _required(value, "Email can't be blank").strip().lower()


class SignupForm(BaseModel):
    name: constr(strip_whitespace=True, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    password: constr(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    password_confirmation: str

    @field_validator("name", mode="before")
    @classmethod
    def name_present(cls, value):
        return _required(value, "Name can't be blank")

    @field_validator("email", mode="before")
    @classmethod
    def email_present(cls, value):
        return _normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def password_present(cls, value):
        if not value:
            raise ValueError("Password can't be blank")
        return value

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Password doesn't match confirmation")
        return value


class ProfileForm(BaseModel):
    """Self-service edit. A blank password keeps the current one."""

    name: constr(strip_whitespace=True, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    password: Optional[constr(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)] = None
    password_confirmation: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_present(cls, value):
        return _required(value, "Name can't be blank")

    @field_validator("email", mode="before")
    @classmethod
    def email_present(cls, value):
        return _normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def blank_password_means_unchanged(cls, value):
        return value or None

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        password = info.data.get("password")
        if password and value != password:
            raise ValueError("Password doesn't match confirmation")
        return value or None


class MicropostForm(BaseModel):
    content: constr(strip_whitespace=True, max_length=MICROPOST_MAX_LENGTH)

    @field_validator("content", mode="before")
    @classmethod
    def content_present(cls, value):
        return _required(value, "Content can't be blank")


def format_errors(exc: ValidationError) -> List[ValidationResult]:
    return [
        ValidationResult(
            loc=".".join(str(p) for p in error["loc"]),
            msg=error["msg"].removeprefix("Value error, "),
        )
        for error in exc.errors()
    ]
