"""S3 client providers."""

from collections.abc import AsyncGenerator

from dishka import Provider, Scope, provide

from asyncs3.client import S3Client
from asyncs3.configs.s3 import S3ClientConfig


class S3ClientProvider(Provider):
    """S3 client provider.

    Requires an `S3ClientConfig` to be provided by another provider of the container.
    """

    @provide(scope=Scope.APP)
    async def s3_client(self, s3_client_config: S3ClientConfig) -> AsyncGenerator[S3Client]:
        """Get the S3 client, closed when the container is closed.

        Args:
            s3_client_config (S3ClientConfig): The S3 client config.

        Returns:
            S3Client: The S3 client.

        """
        async with S3Client.from_config(s3_client_config) as client:
            yield client
