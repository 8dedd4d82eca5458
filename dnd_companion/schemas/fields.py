"""Shared field types for request schemas."""

from typing import Annotated

from pydantic import AfterValidator, Field, StringConstraints

EMPTY_MESSAGE = "Must not be empty!"


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError(EMPTY_MESSAGE)
    return value


# Trimmed, required text (names, handles)
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

# Passwords are kept as typed, only all-whitespace values are rejected
Password = Annotated[str, Field(min_length=1, max_length=128), AfterValidator(_not_blank)]

Handle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
