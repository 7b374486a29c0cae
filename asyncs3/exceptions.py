"""S3 client exceptions."""


class S3ClientException(Exception):
    """Base exception for S3 client errors."""


class S3NoCredentialsFoundClientException(S3ClientException):
    """Raised when no credentials provider yielded an access key and a secret key."""


class S3MalformedEndpointClientException(S3ClientException):
    """Raised when the endpoint URL can't be parsed into a scheme, host and port."""


class S3SigningFailureClientException(S3ClientException):
    """Raised when a request can't be canonicalized or signed."""


class S3UploadStreamClientException(S3ClientException):
    """Raised when the byte source of an upload fails before its end."""


class S3TransportClientException(S3ClientException):
    """Raised when the transport fails to deliver a request or read its response."""


class S3AlreadySignedClientException(S3ClientException):
    """Raised when a request is mutated or finalized after it has been signed."""

    def __init__(self, state: str) -> None:
        """Initialize the exception.

        Args:
            state: The state the request was in when the mutation was attempted.

        """
        super().__init__(f"Request can't be changed in state {state}, it has already been signed.")
        self.state = state
