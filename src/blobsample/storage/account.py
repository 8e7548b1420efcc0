"""
Azure Blob Storage Sample - Storage Account

Turns a storage connection string into an immutable account handle that
knows its blob endpoint and credential, and derives SDK clients from it.
Parsing is left to the SDK; only the placeholder key check is added here.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlparse

from azure.storage.blob import BlobServiceClient

from ..console import echo, wait_for_keypress

logger = logging.getLogger(__name__)

# Well-known storage emulator (Azurite) account
EMULATOR_ACCOUNT_NAME = "devstoreaccount1"

INVALID_CONNECTION_STRING_MESSAGE = (
    "提供的存储信息无效，请确认配置中的AccountName和AccountKey有效后重新启动该示例"
)


def _validate_account_key(account_key: str) -> None:
    """Reject keys that are not base64, such as unedited placeholders."""
    try:
        base64.b64decode(account_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("AccountKey is not a valid base64 string") from e


def _split_client_url(url: str) -> tuple[str, Optional[str]]:
    """Split an SDK client URL into the bare endpoint and its SAS query."""
    parsed = urlparse(url)
    endpoint = parsed._replace(query="").geturl().rstrip("/")
    return endpoint, parsed.query or None


@dataclass(frozen=True)
class StorageAccount:
    """Credentials plus blob endpoint for one storage account."""

    account_name: str
    blob_endpoint: str
    account_key: Optional[str] = None
    sas_token: Optional[str] = None

    @property
    def is_emulated(self) -> bool:
        return self.account_name == EMULATOR_ACCOUNT_NAME

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "StorageAccount":
        """
        Build an account handle from a connection string.

        Accepts every form the SDK accepts: the emulator shortcut, account
        name + key strings and BlobEndpoint + SharedAccessSignature strings.

        Args:
            connection_string: Azure Storage connection string.

        Returns:
            StorageAccount: The account handle.

        Raises:
            ValueError: If the string is malformed, carries no credentials
                        or holds a placeholder account key.
        """
        if not connection_string or not connection_string.strip():
            raise ValueError("Connection string is blank")

        client = BlobServiceClient.from_connection_string(connection_string)
        blob_endpoint, sas_token = _split_client_url(client.url)
        account_key = getattr(client.credential, "account_key", None)
        account_name = client.account_name or getattr(client.credential, "account_name", None)

        if account_key:
            _validate_account_key(account_key)
        elif not sas_token:
            raise ValueError("Connection string has no AccountKey or SharedAccessSignature")
        if not account_name:
            raise ValueError("Connection string does not identify a storage account")

        return cls(
            account_name=account_name,
            blob_endpoint=blob_endpoint,
            account_key=account_key or None,
            sas_token=None if account_key else sas_token,
        )

    @classmethod
    def from_sas_token(
        cls,
        sas_token: str,
        blob_endpoint: str,
        account_name: Optional[str] = None,
    ) -> "StorageAccount":
        """
        Build a restricted account handle from a SAS token.

        Args:
            sas_token: Account or service SAS token.
            blob_endpoint: Blob service endpoint URL.
            account_name: Account name. Derived from the endpoint when omitted.
        """
        if not sas_token:
            raise ValueError("SAS token is empty")
        sas_token = sas_token.lstrip("?")
        if account_name is None:
            account_name = BlobServiceClient(
                account_url=blob_endpoint, credential=sas_token
            ).account_name
        return cls(
            account_name=account_name,
            blob_endpoint=blob_endpoint.rstrip("/"),
            sas_token=sas_token,
        )

    @property
    def credential(self) -> Union[dict, str, None]:
        """Credential accepted by the SDK clients for this account."""
        if self.account_key:
            return {"account_name": self.account_name, "account_key": self.account_key}
        return self.sas_token

    def create_blob_service_client(self) -> BlobServiceClient:
        """Create a client for the account's blob service."""
        logger.debug(f"Creating BlobServiceClient for {self.blob_endpoint}")
        return BlobServiceClient(account_url=self.blob_endpoint, credential=self.credential)

    def __repr__(self) -> str:
        auth = "key" if self.account_key else "sas" if self.sas_token else "anonymous"
        return f"StorageAccount(account_name={self.account_name!r}, auth={auth})"


def create_storage_account_from_connection_string(
    connection_string: str,
    pause: bool = True,
) -> StorageAccount:
    """
    Validate the configured connection string and build the account handle.

    A malformed or placeholder string is fatal: the user is told to fix the
    configuration, and the error is re-raised.

    Args:
        connection_string: Azure Storage connection string.
        pause: Wait for Enter after the diagnostic.

    Returns:
        StorageAccount: The account handle.

    Raises:
        ValueError: If the connection string is invalid.
    """
    try:
        return StorageAccount.from_connection_string(connection_string)
    except ValueError as e:
        logger.error(f"Invalid storage connection string: {e}")
        echo(INVALID_CONNECTION_STRING_MESSAGE)
        wait_for_keypress(pause)
        raise
