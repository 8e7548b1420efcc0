"""
Azure Blob Storage Sample - Shared Access Signatures

Helpers for container URIs and account-level SAS tokens.
"""

import logging
from typing import Optional

from azure.storage.blob import (
    AccountSasPermissions,
    ResourceTypes,
    Services,
    generate_account_sas,
)

from ..models import AccountSasPolicy, SasToken
from .account import StorageAccount

logger = logging.getLogger(__name__)

DEFAULT_SAS_EXPIRY_HOURS = 24


def get_container_uri(account: StorageAccount, container_name: str) -> str:
    """
    Build the URI of a container.

    Args:
        account: Storage account handle.
        container_name: Container name.

    Returns:
        str: "<blob endpoint>/<container name>".
    """
    if not container_name:
        raise ValueError("Container name is required")
    return f"{account.blob_endpoint.rstrip('/')}/{container_name}"


def build_account_sas_policy(
    expiry_hours: int = DEFAULT_SAS_EXPIRY_HOURS,
) -> AccountSasPolicy:
    """
    Access policy for the demo's account SAS.

    Permissions: read, write, list, create, delete.
    Resource types: container and object, blob service only.
    Protocols: HTTPS or HTTP (the emulator has no HTTPS).
    """
    return AccountSasPolicy.for_hours(expiry_hours)


def get_account_sas_token(
    account: StorageAccount,
    policy: Optional[AccountSasPolicy] = None,
) -> str:
    """
    Issue an account SAS token signed with the account key.

    Args:
        account: Account handle holding the account key.
        policy: Access policy. Defaults to the 24 hour demo policy.

    Returns:
        str: The SAS token query string, without a leading '?'.

    Raises:
        ValueError: If the account has no key to sign with.
    """
    if not account.account_key:
        raise ValueError(
            f"Account {account.account_name} has no account key; "
            "an account SAS can only be signed with the key"
        )

    policy = policy or build_account_sas_policy()

    logger.info(
        f"Generating account SAS for {account.account_name} "
        f"expiring {policy.expiry.isoformat()}"
    )

    return generate_account_sas(
        account_name=account.account_name,
        account_key=account.account_key,
        resource_types=ResourceTypes(
            service=False,
            container=policy.container,
            object=policy.object,
        ),
        permission=AccountSasPermissions(
            read=policy.read,
            write=policy.write,
            delete=policy.delete,
            list=policy.list,
            create=policy.create,
        ),
        expiry=policy.expiry,
        start=policy.start,
        services=Services(blob=policy.service),
        protocol=policy.protocol,
    )


def parse_sas_token(token: str) -> SasToken:
    """
    Parse a SAS token into its signature, expiry and permissions.

    Args:
        token: SAS token string.

    Returns:
        SasToken: The parsed token.
    """
    return SasToken.parse(token)
