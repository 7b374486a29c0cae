"""S3 client config."""

from pathlib import Path

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "https://s3.amazonaws.com"
DEFAULT_REGION = "us-east-1"


class S3ClientConfig(BaseSettings):
    """S3 client configuration.

    Values are read from environment variables prefixed with ``S3_`` and from a ``.env`` file.

    Attributes:
        endpoint_url (AnyHttpUrl): The URL of the S3 service. Can be set via S3_ENDPOINT_URL.
            Defaults to the public AWS endpoint over TLS.
        region (str): The region used in the V4 credential scope. Can be set via S3_REGION.
            Defaults to 'us-east-1'.
        access_key_id (str | None): The access key ID. Can be set via S3_ACCESS_KEY_ID.
            When it is set together with the secret access key, the client pins these credentials.
        secret_access_key (str | None): The secret access key. Can be set via S3_SECRET_ACCESS_KEY.
        session_token (str | None): The session token of temporary credentials. Can be set via S3_SESSION_TOKEN.
        profile (str | None): The profile to read from the shared credentials file. Can be set via S3_PROFILE.
            If None, AWS_PROFILE or 'default' is used.
        credentials_file (Path | None): The shared credentials file. Can be set via S3_CREDENTIALS_FILE.
            If None, AWS_SHARED_CREDENTIALS_FILE or ~/.aws/credentials is used.
        use_v2_signature (bool): Whether requests are signed with the legacy V2 scheme. Defaults to False.
        unsigned_payload (bool): Whether V4 requests skip payload hashing. Defaults to False.
        cache_credentials (bool): Whether resolved credentials are reused across requests. Defaults to False,
            which resolves them lazily for every request.
        timeout (float): The transport timeout in seconds. Defaults to 30.
        verify (bool): Whether TLS certificates are verified. Defaults to True.
        ca_bundle (Path | None): A CA bundle used instead of the system store when verifying. Defaults to None.

    """

    model_config = SettingsConfigDict(env_prefix="S3_", env_file=".env", extra="ignore")

    endpoint_url: AnyHttpUrl = Field(
        default=AnyHttpUrl(DEFAULT_ENDPOINT), description="The URL of the S3 service."
    )
    region: str = Field(default=DEFAULT_REGION, description="The region used in the V4 credential scope.")
    access_key_id: str | None = Field(default=None, description="The access key ID.")
    secret_access_key: str | None = Field(default=None, description="The secret access key.")
    session_token: str | None = Field(default=None, description="The session token of temporary credentials.")
    profile: str | None = Field(default=None, description="The profile to read from the shared credentials file.")
    credentials_file: Path | None = Field(default=None, description="The shared credentials file.")
    use_v2_signature: bool = Field(default=False, description="Whether requests use the legacy V2 signature.")
    unsigned_payload: bool = Field(default=False, description="Whether V4 requests skip payload hashing.")
    cache_credentials: bool = Field(default=False, description="Whether resolved credentials are reused.")
    timeout: float = Field(default=30.0, gt=0, description="The transport timeout in seconds.")
    verify: bool = Field(default=True, description="Whether TLS certificates are verified.")
    ca_bundle: Path | None = Field(default=None, description="A CA bundle used when verifying.")
