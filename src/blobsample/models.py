"""
Azure Blob Storage Sample - Data Models

Data classes for listing entries and shared access signatures.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs


class BlobKind(str, Enum):
    """Kind of an entry returned by a container listing."""

    BLOCK = "BlockBlob"
    PAGE = "PageBlob"
    APPEND = "AppendBlob"
    DIRECTORY = "Directory"

    @classmethod
    def from_blob_type(cls, blob_type) -> "BlobKind":
        """
        Map the service's blob type onto a BlobKind.

        Args:
            blob_type: The SDK BlobType member or its string value.

        Returns:
            BlobKind: The matching kind.

        Raises:
            ValueError: If the blob type is unknown.
        """
        value = getattr(blob_type, "value", blob_type)
        for kind in cls:
            if kind is not cls.DIRECTORY and kind.value == value:
                return kind
        raise ValueError(f"Unknown blob type: {blob_type!r}")


@dataclass(frozen=True)
class BlobListing:
    """A single entry from a container listing."""

    name: str
    url: str
    kind: BlobKind
    size: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.url} (类型: {self.kind.value})"


@dataclass(frozen=True)
class AccountSasPolicy:
    """Access policy used to issue an account shared access signature."""

    expiry: datetime
    read: bool = True
    write: bool = True
    list: bool = True
    create: bool = True
    delete: bool = True
    service: bool = True
    container: bool = True
    object: bool = True
    protocol: str = "https,http"
    start: Optional[datetime] = None

    @classmethod
    def for_hours(cls, hours: int, now: Optional[datetime] = None) -> "AccountSasPolicy":
        """
        Build the demo policy expiring a number of hours from now.

        Args:
            hours: Token lifetime in hours.
            now: Reference time. Defaults to the current UTC time.

        Returns:
            AccountSasPolicy: Read/write/list/create/delete on containers and objects.
        """
        if hours <= 0:
            raise ValueError(f"SAS lifetime must be positive, got {hours} hours")
        now = now or datetime.now(timezone.utc)
        return cls(expiry=now + timedelta(hours=hours))


@dataclass(frozen=True)
class SasToken:
    """Parsed view of a shared access signature query string."""

    token: str
    fields: dict = field(default_factory=dict, repr=False)

    @classmethod
    def parse(cls, token: str) -> "SasToken":
        """
        Parse a SAS token string.

        Args:
            token: The token, with or without a leading '?'.

        Returns:
            SasToken: The parsed token.

        Raises:
            ValueError: If the token has no signature or expiry.
        """
        token = token.lstrip("?")
        fields = {key: values[0] for key, values in parse_qs(token).items()}
        if "sig" not in fields:
            raise ValueError("SAS token has no signature (sig)")
        if "se" not in fields:
            raise ValueError("SAS token has no expiry (se)")
        return cls(token=token, fields=fields)

    @property
    def signature(self) -> str:
        return self.fields["sig"]

    @property
    def permissions(self) -> str:
        return self.fields.get("sp", "")

    @property
    def protocol(self) -> str:
        return self.fields.get("spr", "")

    @property
    def expires_on(self) -> datetime:
        return _parse_sas_time(self.fields["se"])

    @property
    def starts_on(self) -> Optional[datetime]:
        if "st" not in self.fields:
            return None
        return _parse_sas_time(self.fields["st"])

    def is_valid_at(self, moment: datetime) -> bool:
        """
        Check whether the token grants access at a given moment.

        The token is valid from its start (inclusive) up to its expiry
        (exclusive).
        """
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        starts_on = self.starts_on
        if starts_on is not None and moment < starts_on:
            return False
        return moment < self.expires_on

    def __str__(self) -> str:
        return self.token


def _parse_sas_time(value: str) -> datetime:
    """Parse an ISO 8601 UTC time as written into SAS tokens."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
