# Azure Blob Storage Sample - Storage Package
"""
Storage account handles, shared access signatures and blob operations.
"""

from .account import StorageAccount, create_storage_account_from_connection_string
from .blob_service import BlobService
from .sas import (
    build_account_sas_policy,
    get_account_sas_token,
    get_container_uri,
    parse_sas_token,
)

__all__ = [
    "BlobService",
    "StorageAccount",
    "build_account_sas_policy",
    "create_storage_account_from_connection_string",
    "get_account_sas_token",
    "get_container_uri",
    "parse_sas_token",
]
