"""
Shared validation functions for Pydantic schemas.

Used by both the token and subscription schemas.
"""


def strip_if_str(value: object) -> object:
    """
    Trim surrounding whitespace from strings, leaving other values untouched.

    Meant for mode="before" validators so that a whitespace-only value fails
    the field's min_length constraint instead of being stored.
    """
    if isinstance(value, str):
        return value.strip()
    return value
