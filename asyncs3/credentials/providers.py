"""Local credentials providers.

Each provider is an async callable returning `Credentials` or None, so it can be placed in a
`CredentialsResolver` chain. Remote (metadata endpoint) providers live in
`asyncs3.credentials.metadata`.
"""

import configparser
import logging
import os
from collections.abc import Mapping
from pathlib import Path

import aiofiles

from asyncs3.configs.s3 import S3ClientConfig
from asyncs3.credentials.abstract import Credentials

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
DEFAULT_CREDENTIALS_FILE = Path("~/.aws/credentials")


class StaticCredentialsProvider:
    """Provider of explicitly supplied credentials."""

    def __init__(self, credentials: Credentials | None) -> None:
        """Initialize the provider.

        Args:
            credentials: The credentials to return. If None, the provider yields nothing.

        """
        self._credentials = credentials

    async def __call__(self) -> Credentials | None:
        """Return the supplied credentials."""
        return self._credentials


class EnvironmentCredentialsProvider:
    """Provider reading the standard AWS environment variables.

    Reads AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY, falling back to the older
    AWS_ACCESS_KEY and AWS_SECRET_KEY names, and AWS_SESSION_TOKEN.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Initialize the provider.

        Args:
            environ: The environment to read. If None, `os.environ` is read on every call.

        """
        self._environ = environ

    async def __call__(self) -> Credentials | None:
        """Read credentials from the environment."""
        environ = os.environ if self._environ is None else self._environ

        return Credentials.from_parts(
            environ.get("AWS_ACCESS_KEY_ID") or environ.get("AWS_ACCESS_KEY"),
            environ.get("AWS_SECRET_ACCESS_KEY") or environ.get("AWS_SECRET_KEY"),
            environ.get("AWS_SESSION_TOKEN"),
        )


class SettingsCredentialsProvider:
    """Provider reading the process settings (S3_* variables and the .env file)."""

    def __init__(self, config: S3ClientConfig | None = None) -> None:
        """Initialize the provider.

        Args:
            config: The settings to read. If None, settings are loaded on every call.

        """
        self._config = config

    async def __call__(self) -> Credentials | None:
        """Read credentials from the settings."""
        config = self._config or S3ClientConfig()

        return Credentials.from_parts(config.access_key_id, config.secret_access_key, config.session_token)


class ProfileCredentialsProvider:
    """Provider reading a named profile from the shared credentials file.

    The file uses the INI format of the AWS CLI:

        ```ini
        [default]
        aws_access_key_id = AKIA...
        aws_secret_access_key = ...
        aws_session_token = ...
        ```

    """

    def __init__(
        self,
        profile: str | None = None,
        credentials_file: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            profile: The profile name. If None, AWS_PROFILE or "default" is used.
            credentials_file: The credentials file. If None, AWS_SHARED_CREDENTIALS_FILE
                or ~/.aws/credentials is used.
            environ: The environment used to look up the defaults. If None, `os.environ` is used.

        """
        self._profile = profile
        self._credentials_file = Path(credentials_file) if credentials_file is not None else None
        self._environ = environ

    @property
    def profile(self) -> str:
        """The profile name to read."""
        environ = os.environ if self._environ is None else self._environ
        return self._profile or environ.get("AWS_PROFILE") or DEFAULT_PROFILE

    @property
    def credentials_file(self) -> Path:
        """The credentials file to read."""
        if self._credentials_file is not None:
            return self._credentials_file.expanduser()

        environ = os.environ if self._environ is None else self._environ
        return Path(environ.get("AWS_SHARED_CREDENTIALS_FILE") or DEFAULT_CREDENTIALS_FILE).expanduser()

    async def __call__(self) -> Credentials | None:
        """Read the profile from the credentials file."""
        path = self.credentials_file

        try:
            async with aiofiles.open(path, encoding="utf-8") as file:
                content = await file.read()
        except FileNotFoundError:
            logger.debug(f"Credentials file {path} does not exist")
            return None
        except (OSError, UnicodeDecodeError):
            logger.warning(f"Credentials file {path} can't be read", exc_info=True)
            return None

        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(content, source=str(path))
        except configparser.Error:
            logger.warning(f"Credentials file {path} can't be parsed", exc_info=True)
            return None

        if not parser.has_section(self.profile):
            logger.debug(f"Profile {self.profile} not found in {path}")
            return None

        section = parser[self.profile]

        return Credentials.from_parts(
            section.get("aws_access_key_id"),
            section.get("aws_secret_access_key"),
            section.get("aws_session_token"),
        )
