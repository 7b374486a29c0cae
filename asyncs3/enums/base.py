"""Base enum."""

from enum import StrEnum


class BaseEnum(StrEnum):
    """Base enum.

    Members compare equal to their string values, so they can be read from
    settings and environment variables as plain strings.
    """
