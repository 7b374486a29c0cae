"""Credentials and credentials providers."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """AWS credentials.

    Attributes:
        access_key: The access key ID.
        secret_key: The secret access key.
        session_token: The session token of temporary credentials, if any.

    """

    access_key: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_parts(
        cls, access_key: str | None, secret_key: str | None, session_token: str | None = None
    ) -> "Credentials | None":
        """Build credentials if both keys are present.

        Args:
            access_key: The access key ID.
            secret_key: The secret access key.
            session_token: The session token.

        Returns:
            The credentials, or None if either key is missing or blank.

        """
        if not access_key or not secret_key:
            return None

        access_key, secret_key = access_key.strip(), secret_key.strip()
        if not access_key or not secret_key:
            return None

        return cls(access_key=access_key, secret_key=secret_key, session_token=session_token or None)


type CredentialsProvider = Callable[[], Awaitable[Credentials | None]]
"""A credentials source.

A provider returns None when it has nothing to offer, so the resolver can try the next one.
"""
