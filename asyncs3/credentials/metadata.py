"""Metadata endpoint credentials providers.

Credentials from these endpoints are temporary. Refreshing them before they expire is left to the
caller, who can force `CredentialsResolver.refresh`.
"""

import logging
import os
from collections.abc import Mapping
from typing import Any

import httpx

from asyncs3.credentials.abstract import Credentials

logger = logging.getLogger(__name__)

CONTAINER_METADATA_HOST = "http://169.254.170.2"
INSTANCE_METADATA_HOST = "http://169.254.169.254"
INSTANCE_METADATA_TOKEN_PATH = "/latest/api/token"
INSTANCE_METADATA_ROLE_PATH = "/latest/meta-data/iam/security-credentials/"
INSTANCE_METADATA_TOKEN_TTL = "21600"
DEFAULT_METADATA_TIMEOUT = 1.0


def _credentials_from_document(document: Any) -> Credentials | None:
    """Extract credentials from a metadata JSON document."""
    if not isinstance(document, dict):
        return None

    return Credentials.from_parts(
        document.get("AccessKeyId"),
        document.get("SecretAccessKey"),
        document.get("Token"),
    )


class ContainerCredentialsProvider:
    """Provider reading the ECS container credentials endpoint.

    The endpoint is taken from AWS_CONTAINER_CREDENTIALS_RELATIVE_URI (relative to 169.254.170.2)
    or AWS_CONTAINER_CREDENTIALS_FULL_URI. AWS_CONTAINER_AUTHORIZATION_TOKEN is sent as the
    Authorization header when set.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            environ: The environment to read. If None, `os.environ` is read on every call.
            timeout: The request timeout in seconds.
            transport: The httpx transport to use. If None, the default network transport is used.

        """
        self._environ = environ
        self._timeout = timeout
        self._transport = transport

    def _url(self, environ: Mapping[str, str]) -> str | None:
        relative_uri = environ.get("AWS_CONTAINER_CREDENTIALS_RELATIVE_URI")
        if relative_uri:
            return CONTAINER_METADATA_HOST + relative_uri

        return environ.get("AWS_CONTAINER_CREDENTIALS_FULL_URI") or None

    async def __call__(self) -> Credentials | None:
        """Fetch credentials from the container endpoint."""
        environ = os.environ if self._environ is None else self._environ
        url = self._url(environ)
        if url is None:
            return None

        headers = {}
        if token := environ.get("AWS_CONTAINER_AUTHORIZATION_TOKEN"):
            headers["Authorization"] = token

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                document = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug(f"Container credentials endpoint {url} is unavailable: {exc}")
            return None

        return _credentials_from_document(document)


class InstanceMetadataCredentialsProvider:
    """Provider reading the EC2 instance metadata service (IMDSv2)."""

    def __init__(
        self,
        host: str = INSTANCE_METADATA_HOST,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            host: The metadata service base URL.
            timeout: The request timeout in seconds.
            transport: The httpx transport to use. If None, the default network transport is used.

        """
        self._host = host
        self._timeout = timeout
        self._transport = transport

    async def __call__(self) -> Credentials | None:
        """Fetch the instance role credentials."""
        try:
            async with httpx.AsyncClient(
                base_url=self._host, timeout=self._timeout, transport=self._transport
            ) as client:
                token_response = await client.put(
                    INSTANCE_METADATA_TOKEN_PATH,
                    headers={"X-aws-ec2-metadata-token-ttl-seconds": INSTANCE_METADATA_TOKEN_TTL},
                )
                token_response.raise_for_status()
                headers = {"X-aws-ec2-metadata-token": token_response.text}

                role_response = await client.get(INSTANCE_METADATA_ROLE_PATH, headers=headers)
                role_response.raise_for_status()
                role = role_response.text.strip().splitlines()[0] if role_response.text.strip() else None
                if role is None:
                    return None

                credentials_response = await client.get(INSTANCE_METADATA_ROLE_PATH + role, headers=headers)
                credentials_response.raise_for_status()
                document = credentials_response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug(f"Instance metadata service {self._host} is unavailable: {exc}")
            return None

        return _credentials_from_document(document)
