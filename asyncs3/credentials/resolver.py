"""Credentials resolution chain."""

import asyncio
import logging
from collections.abc import Sequence

from asyncs3.configs.s3 import S3ClientConfig
from asyncs3.credentials.abstract import Credentials, CredentialsProvider
from asyncs3.credentials.metadata import ContainerCredentialsProvider, InstanceMetadataCredentialsProvider
from asyncs3.credentials.providers import (
    EnvironmentCredentialsProvider,
    ProfileCredentialsProvider,
    SettingsCredentialsProvider,
    StaticCredentialsProvider,
)
from asyncs3.exceptions import S3NoCredentialsFoundClientException

logger = logging.getLogger(__name__)


class CredentialsResolver:
    """Resolves credentials from an ordered list of providers.

    Providers are tried in order and the first one returning credentials wins; the providers after it
    are not called. If none returns credentials, `S3NoCredentialsFoundClientException` is raised.

    Example:
        ```python
        resolver = CredentialsResolver([EnvironmentCredentialsProvider(), ProfileCredentialsProvider("dev")])
        credentials = await resolver.resolve()
        ```

    """

    def __init__(self, providers: Sequence[CredentialsProvider], cache: bool = False) -> None:
        """Initialize the resolver.

        Args:
            providers: The providers to try, in priority order.
            cache: Whether the first resolved credentials are reused by later calls.
                If False, the chain runs on every `resolve` call.

        """
        self._providers = tuple(providers)
        self._cache = cache
        self._cached: Credentials | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def default(
        cls, credentials: Credentials | None = None, config: S3ClientConfig | None = None
    ) -> "CredentialsResolver":
        """Create the default chain.

        The order is: explicit credentials, environment variables, settings, the shared credentials
        file profile, the container endpoint and the instance metadata service.

        Args:
            credentials: Explicitly supplied credentials. When set, they are cached process-wide.
            config: The client settings.

        Returns:
            The resolver.

        """
        config = config or S3ClientConfig()

        providers: list[CredentialsProvider] = [
            StaticCredentialsProvider(credentials),
            EnvironmentCredentialsProvider(),
            SettingsCredentialsProvider(config),
            ProfileCredentialsProvider(config.profile, config.credentials_file),
            ContainerCredentialsProvider(),
            InstanceMetadataCredentialsProvider(),
        ]

        return cls(providers, cache=credentials is not None or config.cache_credentials)

    @classmethod
    def static(cls, credentials: Credentials) -> "CredentialsResolver":
        """Create a resolver pinned to the given credentials."""
        return cls([StaticCredentialsProvider(credentials)], cache=True)

    async def resolve(self) -> Credentials:
        """Resolve credentials.

        Returns:
            The credentials of the first provider that yields a complete key pair.

        Raises:
            S3NoCredentialsFoundClientException: If no provider yields credentials.

        """
        cached = self._cached
        if cached is not None:
            return cached

        if not self._cache:
            return await self._run_chain()

        async with self._lock:
            if self._cached is None:
                self._cached = await self._run_chain()
            return self._cached

    async def refresh(self) -> Credentials:
        """Force re-resolution.

        Requests that already hold the previous credentials keep using them; only later
        `resolve` calls see the new ones.

        Returns:
            The newly resolved credentials.

        Raises:
            S3NoCredentialsFoundClientException: If no provider yields credentials.

        """
        async with self._lock:
            credentials = await self._run_chain()
            if self._cache:
                self._cached = credentials
            return credentials

    async def _run_chain(self) -> Credentials:
        for index, provider in enumerate(self._providers):
            credentials = await provider()
            if credentials is not None:
                logger.debug(f"Credentials resolved by provider #{index} ({type(provider).__name__})")
                return credentials

        msg = f"No credentials found by any of the {len(self._providers)} providers."
        raise S3NoCredentialsFoundClientException(msg)
