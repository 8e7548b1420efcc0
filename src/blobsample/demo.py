#!/usr/bin/env python3
"""
Azure Blob Storage Sample - Demo Driver

Walks through the Blob storage service: block blobs uploaded with the
account key, block blobs uploaded with an account shared access signature,
and page blobs. Each routine creates its own uniquely named container and
deletes it when done.

Runs against the local storage emulator (Azurite) by default. To target a
real storage account, set STORAGE_CONNECTION_STRING in the environment or
in a .env file.

Usage:
    python -m src.blobsample.demo

Environment Variables:
    STORAGE_CONNECTION_STRING: Azure Storage connection string
    PAUSE_ON_EXIT: Set to false to skip the final "press any key" pause
"""

import logging
import os
import sys
import uuid
from typing import Optional

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ServiceRequestError,
)

from .config import PAGE_SIZE, Settings, get_settings
from .console import echo, wait_for_keypress
from .storage.account import StorageAccount, create_storage_account_from_connection_string
from .storage.blob_service import BlobService
from .storage.sas import (
    build_account_sas_policy,
    get_account_sas_token,
    get_container_uri,
    parse_sas_token,
)

logger = logging.getLogger(__name__)

BLOCK_BLOB_CONTAINER_PREFIX = "demoblockblobcontainer"
PAGE_BLOB_CONTAINER_PREFIX = "demopageblobcontainer"
PAGE_BLOB_NAME = "samplepageblob"

EMULATOR_NOT_RUNNING_MESSAGE = (
    "如果使用默认配置，请确保Azure存储模拟器已经启动。"
    "启动Azurite之后，请重新启动该示例."
)
AUTHENTICATION_FAILED_MESSAGE = (
    "存储服务拒绝了提供的凭据，请确认AccountKey或SAS令牌有效并且没有过期后重新启动该示例."
)
SERVICE_ERROR_MESSAGE = "存储服务返回错误，请检查存储账号的配置后重新启动该示例."


def unique_container_name(prefix: str) -> str:
    """Container name with a random suffix so runs never collide."""
    return f"{prefix}-{uuid.uuid4()}"


def create_container_or_fail(
    service: BlobService,
    container_name: str,
    settings: Settings,
) -> None:
    """
    Create the demo container, explaining the likely cause on failure.

    Raises:
        ServiceRequestError: The service could not be reached.
        ClientAuthenticationError: The credentials were rejected.
        HttpResponseError: Any other service error.
    """
    try:
        service.create_container(
            container_name, public_access=settings.container_public_access
        )
    except ServiceRequestError as e:
        logger.error(f"Storage service unreachable: {e}")
        echo(EMULATOR_NOT_RUNNING_MESSAGE)
        wait_for_keypress(settings.pause_on_exit)
        raise
    except ClientAuthenticationError as e:
        logger.error(f"Storage service rejected the credentials: {e}")
        echo(AUTHENTICATION_FAILED_MESSAGE)
        wait_for_keypress(settings.pause_on_exit)
        raise
    except HttpResponseError as e:
        logger.error(f"Failed to create container {container_name}: {e}")
        echo(SERVICE_ERROR_MESSAGE)
        wait_for_keypress(settings.pause_on_exit)
        raise


def run_block_blob_steps(
    service: BlobService,
    container_name: str,
    settings: Settings,
) -> None:
    """Upload, list, download, snapshot and clean up one block blob."""
    image_to_upload = settings.image_to_upload
    blob_name = os.path.basename(image_to_upload)

    echo("2. 上传 BlockBlob")
    blob_url = service.upload_file(container_name, blob_name, image_to_upload)

    echo("3. 列出容器内所有的blobs")
    for blob in service.list_blobs(container_name):
        echo(f"- {blob}")

    echo(f"4. 下载Blob，下载地址：{blob_url}")
    download_path = os.path.join(settings.download_directory, f"CopyOf{blob_name}")
    service.download_to_file(container_name, blob_name, download_path)

    echo("5. 创建只读的blob快照")
    service.create_snapshot(container_name, blob_name)

    echo("6. 删除块Blob以及所有的快照")
    service.delete_blob(container_name, blob_name, include_snapshots=True)

    echo("7. 删除容器")
    service.delete_container(container_name)


def basic_block_blob_operations(settings: Optional[Settings] = None) -> None:
    """
    Block blob basics using the account key from the connection string.

    Args:
        settings: Application settings. Defaults to the cached settings.
    """
    settings = settings or get_settings()
    container_name = unique_container_name(BLOCK_BLOB_CONTAINER_PREFIX)

    account = create_storage_account_from_connection_string(
        settings.storage_connection_string, pause=settings.pause_on_exit
    )
    service = BlobService(account=account)

    echo("1. 创建容器...")
    create_container_or_fail(service, container_name, settings)

    run_block_blob_steps(service, container_name, settings)


def block_blob_operations_with_account_sas(settings: Optional[Settings] = None) -> None:
    """
    Block blob basics using an account SAS instead of the account key.

    The SAS is issued from the account key with read, write, list, create
    and delete permissions on containers and objects, and expires after
    `settings.sas_expiry_hours`.

    Args:
        settings: Application settings. Defaults to the cached settings.
    """
    settings = settings or get_settings()
    container_name = unique_container_name(BLOCK_BLOB_CONTAINER_PREFIX)

    account = create_storage_account_from_connection_string(
        settings.storage_connection_string, pause=settings.pause_on_exit
    )
    sas_token = get_account_sas_token(
        account, build_account_sas_policy(settings.sas_expiry_hours)
    )
    parsed = parse_sas_token(sas_token)

    echo()
    echo(f"账户SAS的签名: {parsed.signature}")
    echo(f"账户SAS的令牌: {parsed.token}")
    echo()

    echo("1. 使用账户SAS创建容器")
    container_uri = get_container_uri(account, container_name)
    logger.info(f"Container URI: {container_uri}")

    sas_account = StorageAccount.from_sas_token(
        sas_token, account.blob_endpoint, account.account_name
    )
    service = BlobService(account=sas_account)
    create_container_or_fail(service, container_name, settings)

    run_block_blob_steps(service, container_name, settings)


def basic_page_blob_operations(settings: Optional[Settings] = None) -> None:
    """
    Page blob basics: create, write a page, list in segments, read a range.

    Args:
        settings: Application settings. Defaults to the cached settings.
    """
    settings = settings or get_settings()
    container_name = unique_container_name(PAGE_BLOB_CONTAINER_PREFIX)

    account = create_storage_account_from_connection_string(
        settings.storage_connection_string, pause=settings.pause_on_exit
    )
    service = BlobService(account=account)

    echo("1. 创建容器...")
    create_container_or_fail(service, container_name, settings)

    echo("2. 创建页Blob")
    service.create_page_blob(container_name, PAGE_BLOB_NAME, settings.page_blob_size)

    echo("3. 写页blob")
    page = os.urandom(PAGE_SIZE)
    service.upload_pages(container_name, PAGE_BLOB_NAME, page, offset=0)

    # A segment holds at most list_max_results blobs (5000 by default)
    echo("4. 列出容器内的Blobs")
    for segment in service.list_blobs_segmented(container_name, settings.list_max_results):
        for blob in segment:
            echo(str(blob))

    echo("5. 读取页Blob")
    data = service.download_range(container_name, PAGE_BLOB_NAME, 0, len(page))
    logger.info(f"Read {len(data)} bytes back from {PAGE_BLOB_NAME}")

    echo("6. 删除页Blob")
    service.delete_blob(container_name, PAGE_BLOB_NAME)

    echo("7. 删除容器")
    service.delete_container(container_name)


def main() -> int:
    """Run the three demo routines one after another."""
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    missing = settings.validate_required()
    if missing:
        raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")

    echo("Azure Blob存储示例\n")

    echo("块 Blob 示例")
    basic_block_blob_operations(settings)

    block_blob_operations_with_account_sas(settings)

    echo("\n页 Blob 示例")
    basic_page_blob_operations(settings)

    echo("按任意键退出")
    wait_for_keypress(settings.pause_on_exit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
