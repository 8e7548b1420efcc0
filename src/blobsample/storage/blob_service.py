"""
Azure Blob Storage Sample - Blob Storage Service

Container, block blob and page blob operations on Azure Blob Storage.
"""

import logging
import os
from typing import Iterator, Optional
from urllib.parse import quote

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import (
    BlobClient,
    BlobPrefix,
    BlobServiceClient,
    ContainerClient,
)

from ..config import PAGE_SIZE, get_settings
from ..models import BlobKind, BlobListing
from .account import StorageAccount

logger = logging.getLogger(__name__)


def check_page_aligned(value: int, what: str = "size", allow_zero: bool = False) -> None:
    """
    Ensure a page blob size or offset is a multiple of 512 bytes.

    Raises:
        ValueError: If the value is negative, zero (unless allowed) or unaligned.
    """
    if value < 0 or (value == 0 and not allow_zero) or value % PAGE_SIZE:
        raise ValueError(
            f"Page blob {what} must be a {'non-negative' if allow_zero else 'positive'} "
            f"multiple of {PAGE_SIZE} bytes, got {value}"
        )


class BlobService:
    """Service for interacting with Azure Blob Storage."""

    def __init__(self, account: StorageAccount):
        """
        Initialize the blob service.

        Args:
            account: Storage account handle supplying endpoint and credential.
        """
        self.account = account
        self._client: Optional[BlobServiceClient] = None

    @property
    def client(self) -> BlobServiceClient:
        """Get or create the BlobServiceClient."""
        if self._client is None:
            self._client = self.account.create_blob_service_client()
        return self._client

    def get_container_client(self, container_name: str) -> ContainerClient:
        """Get a client for a container."""
        return self.client.get_container_client(container_name)

    def get_blob_client(self, container_name: str, blob_name: str) -> BlobClient:
        """Get a client for a blob inside a container."""
        return self.get_container_client(container_name).get_blob_client(blob_name)

    def get_blob_url(self, container_name: str, blob_name: str) -> str:
        """
        URL of a blob without any SAS query string.

        The SDK client URLs carry the SAS token when the account uses one,
        so URLs shown to the user are built from the bare endpoint.
        """
        return f"{self.account.blob_endpoint}/{container_name}/{quote(blob_name)}"

    # Containers

    def create_container(
        self,
        container_name: str,
        public_access: Optional[str] = None,
    ) -> bool:
        """
        Create a container if it does not exist.

        Args:
            container_name: Name of the container.
            public_access: None for private, "blob" or "container" for
                           anonymous read access.

        Returns:
            bool: True if created, False if it already existed.
        """
        logger.info(f"Creating container: {container_name}")
        container_client = self.get_container_client(container_name)
        try:
            container_client.create_container(public_access=public_access)
        except ResourceExistsError:
            logger.info(f"Container already exists: {container_name}")
            return False
        return True

    def delete_container(self, container_name: str) -> bool:
        """
        Delete a container if it exists.

        Returns:
            bool: True if deleted, False if it did not exist.
        """
        logger.info(f"Deleting container: {container_name}")
        try:
            self.get_container_client(container_name).delete_container()
        except ResourceNotFoundError:
            logger.info(f"Container not found, nothing to delete: {container_name}")
            return False
        return True

    # Block blobs

    def upload_file(self, container_name: str, blob_name: str, file_path: str) -> str:
        """
        Upload a local file as a block blob, replacing any existing blob.

        Args:
            container_name: Target container.
            blob_name: Name of the blob.
            file_path: Path of the local file.

        Returns:
            str: URL of the uploaded blob.
        """
        blob_client = self.get_blob_client(container_name, blob_name)
        size = os.path.getsize(file_path)
        logger.info(f"Uploading {file_path} ({size} bytes) to {container_name}/{blob_name}")

        try:
            with open(file_path, "rb") as data:
                blob_client.upload_blob(data, blob_type="BlockBlob", overwrite=True)
        except Exception as e:
            logger.error(f"Failed to upload {file_path}: {e}")
            raise

        return self.get_blob_url(container_name, blob_name)

    def download_to_file(self, container_name: str, blob_name: str, file_path: str) -> int:
        """
        Download a blob into a local file, creating or truncating it.

        Returns:
            int: Number of bytes written.
        """
        logger.info(f"Downloading blob {container_name}/{blob_name} to {file_path}")
        blob_client = self.get_blob_client(container_name, blob_name)

        # Start the download first so a failed request leaves no empty file
        downloader = blob_client.download_blob()
        with open(file_path, "wb") as target:
            written = downloader.readinto(target)

        logger.info(f"Wrote {written} bytes to {file_path}")
        return written

    def create_snapshot(self, container_name: str, blob_name: str) -> str:
        """
        Create a read-only snapshot of a blob.

        Returns:
            str: The snapshot timestamp identifying the snapshot.
        """
        blob_client = self.get_blob_client(container_name, blob_name)
        snapshot = blob_client.create_snapshot()
        logger.info(f"Created snapshot {snapshot['snapshot']} of {container_name}/{blob_name}")
        return snapshot["snapshot"]

    def delete_blob(
        self,
        container_name: str,
        blob_name: str,
        include_snapshots: bool = False,
    ) -> bool:
        """
        Delete a blob if it exists.

        Args:
            container_name: Container of the blob.
            blob_name: Name of the blob.
            include_snapshots: Also delete all snapshots of the blob. A blob
                               that has snapshots cannot be deleted without it.

        Returns:
            bool: True if deleted, False if it did not exist.
        """
        logger.info(
            f"Deleting blob {container_name}/{blob_name}"
            f"{' and its snapshots' if include_snapshots else ''}"
        )
        blob_client = self.get_blob_client(container_name, blob_name)
        try:
            if include_snapshots:
                blob_client.delete_blob(delete_snapshots="include")
            else:
                blob_client.delete_blob()
        except ResourceNotFoundError:
            logger.info(f"Blob not found, nothing to delete: {container_name}/{blob_name}")
            return False
        return True

    # Page blobs

    def create_page_blob(self, container_name: str, blob_name: str, size: int) -> str:
        """
        Create an empty page blob.

        Args:
            container_name: Target container.
            blob_name: Name of the blob.
            size: Blob size in bytes, a positive multiple of 512.

        Returns:
            str: URL of the page blob.

        Raises:
            ValueError: If the size is not a positive multiple of 512.
        """
        check_page_aligned(size)
        logger.info(f"Creating page blob {container_name}/{blob_name} of {size} bytes")
        blob_client = self.get_blob_client(container_name, blob_name)
        blob_client.create_page_blob(size)
        return self.get_blob_url(container_name, blob_name)

    def upload_pages(
        self,
        container_name: str,
        blob_name: str,
        data: bytes,
        offset: int = 0,
    ) -> None:
        """
        Write whole pages into a page blob at a page-aligned offset.

        Raises:
            ValueError: If the data length or the offset is not page aligned.
        """
        check_page_aligned(len(data), "write length")
        check_page_aligned(offset, "offset", allow_zero=True)
        logger.info(
            f"Writing {len(data)} bytes at offset {offset} to {container_name}/{blob_name}"
        )
        blob_client = self.get_blob_client(container_name, blob_name)
        blob_client.upload_page(data, offset=offset, length=len(data))

    def download_range(
        self,
        container_name: str,
        blob_name: str,
        offset: int,
        length: int,
    ) -> bytes:
        """
        Read a byte range of a blob.

        Returns:
            bytes: Up to `length` bytes starting at `offset`.
        """
        if offset < 0 or length <= 0:
            raise ValueError(f"Invalid range: offset={offset}, length={length}")
        logger.info(f"Reading {length} bytes at offset {offset} from {container_name}/{blob_name}")
        blob_client = self.get_blob_client(container_name, blob_name)
        return blob_client.download_blob(offset=offset, length=length).readall()

    # Listings

    def list_blobs(
        self,
        container_name: str,
        prefix: Optional[str] = None,
    ) -> list[BlobListing]:
        """
        List the top level of a container.

        Blobs below a "/" delimiter are rolled up into directory entries.

        Args:
            container_name: Container to list.
            prefix: Optional prefix to filter blobs.

        Returns:
            list[BlobListing]: Blobs and virtual directories.
        """
        container_client = self.get_container_client(container_name)
        items = container_client.walk_blobs(name_starts_with=prefix, delimiter="/")
        return [self._to_listing(container_name, item) for item in items]

    def list_blobs_segmented(
        self,
        container_name: str,
        max_results: Optional[int] = None,
    ) -> Iterator[list[BlobListing]]:
        """
        List every blob in a container one segment at a time.

        Each segment is fetched with the continuation token returned by the
        previous one until the service returns no token.

        Args:
            container_name: Container to list.
            max_results: Maximum entries per segment. Defaults to settings.

        Yields:
            list[BlobListing]: One listing segment.
        """
        max_results = max_results or get_settings().list_max_results
        container_client = self.get_container_client(container_name)

        token = None
        segment_number = 0
        while True:
            pages = container_client.list_blobs(results_per_page=max_results).by_page(
                continuation_token=token
            )
            segment = [self._to_listing(container_name, item) for item in next(pages)]
            segment_number += 1
            logger.debug(
                f"Listed segment {segment_number} of {container_name}: {len(segment)} blobs"
            )
            yield segment

            token = pages.continuation_token
            if not token:
                break

    def _to_listing(self, container_name: str, item) -> BlobListing:
        """Convert an SDK listing item into a BlobListing."""
        url = self.get_blob_url(container_name, item.name)
        if isinstance(item, BlobPrefix):
            return BlobListing(name=item.name, url=url, kind=BlobKind.DIRECTORY)
        return BlobListing(
            name=item.name,
            url=url,
            kind=BlobKind.from_blob_type(item.blob_type),
            size=item.size,
        )

