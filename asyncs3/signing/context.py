"""Signature schemes and signing context."""

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime

from asyncs3.enums.base import BaseEnum

SERVICE = "s3"
SCOPE_TERMINATOR = "aws4_request"


class SignatureScheme(BaseEnum):
    """Request signature scheme.

    Values:
        V2: The legacy HMAC-SHA1 scheme.
        V4: The current HMAC-SHA256 scheme.
    """

    V2 = "v2"
    V4 = "v4"


@dataclass(frozen=True)
class SigningContext:
    """Inputs of a signature that don't come from the request.

    Attributes:
        timestamp: The signing time. Naive datetimes are taken as UTC.
        region: The region of the credential scope.
        service: The service of the credential scope.

    """

    timestamp: datetime
    region: str
    service: str = SERVICE

    @property
    def utc_timestamp(self) -> datetime:
        """The signing time in UTC."""
        if self.timestamp.tzinfo is None:
            return self.timestamp.replace(tzinfo=UTC)
        return self.timestamp.astimezone(UTC)

    @property
    def amz_date(self) -> str:
        """The timestamp in the ISO 8601 basic format, e.g. 20130524T000000Z."""
        return self.utc_timestamp.strftime("%Y%m%dT%H%M%SZ")

    @property
    def datestamp(self) -> str:
        """The date of the timestamp, e.g. 20130524."""
        return self.utc_timestamp.strftime("%Y%m%d")

    @property
    def http_date(self) -> str:
        """The timestamp in the RFC 1123 format, e.g. Fri, 24 May 2013 00:00:00 GMT."""
        return format_datetime(self.utc_timestamp, usegmt=True)

    @property
    def credential_scope(self) -> str:
        """The V4 credential scope, e.g. 20130524/us-east-1/s3/aws4_request."""
        return f"{self.datestamp}/{self.region}/{self.service}/{SCOPE_TERMINATOR}"
