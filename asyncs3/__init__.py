"""Non-blocking S3 client.

Signs requests with AWS Signature V4 or the legacy V2 scheme and sends them over httpx.

Example:
    ```python
    from asyncs3 import S3Client, S3ClientConfig

    async with S3Client.from_config(S3ClientConfig()) as client:
        await client.put_file("bucket", "reports/2024.csv", "2024.csv")
    ```

"""

from asyncs3.client import S3Client
from asyncs3.configs.s3 import S3ClientConfig
from asyncs3.credentials.abstract import Credentials
from asyncs3.credentials.resolver import CredentialsResolver
from asyncs3.exceptions import (
    S3AlreadySignedClientException,
    S3ClientException,
    S3MalformedEndpointClientException,
    S3NoCredentialsFoundClientException,
    S3SigningFailureClientException,
    S3TransportClientException,
    S3UploadStreamClientException,
)
from asyncs3.http.endpoint import Endpoint
from asyncs3.http.models import S3Response, UserMetadata
from asyncs3.signing.context import SignatureScheme

__all__ = [
    "Credentials",
    "CredentialsResolver",
    "Endpoint",
    "S3AlreadySignedClientException",
    "S3Client",
    "S3ClientConfig",
    "S3ClientException",
    "S3MalformedEndpointClientException",
    "S3NoCredentialsFoundClientException",
    "S3Response",
    "S3SigningFailureClientException",
    "S3TransportClientException",
    "S3UploadStreamClientException",
    "SignatureScheme",
    "UserMetadata",
]
