"""
Live tests against the storage emulator (Azurite) or a real account.

Skipped unless BLOBSAMPLE_LIVE_CONNECTION_STRING is set, for example:

    BLOBSAMPLE_LIVE_CONNECTION_STRING="UseDevelopmentStorage=true" pytest tests/integration
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from azure.core.exceptions import HttpResponseError

from src.blobsample.demo import unique_container_name
from src.blobsample.models import AccountSasPolicy, BlobKind
from src.blobsample.storage.account import StorageAccount
from src.blobsample.storage.blob_service import BlobService
from src.blobsample.storage.sas import get_account_sas_token

CONNECTION_STRING = os.getenv("BLOBSAMPLE_LIVE_CONNECTION_STRING")

pytestmark = pytest.mark.skipif(
    not CONNECTION_STRING,
    reason="BLOBSAMPLE_LIVE_CONNECTION_STRING not set",
)


@pytest.fixture
def account():
    return StorageAccount.from_connection_string(CONNECTION_STRING)


@pytest.fixture
def service(account):
    return BlobService(account=account)


@pytest.fixture
def container(service):
    """A fresh container, removed after the test."""
    name = unique_container_name("livetestcontainer")
    service.create_container(name)
    yield name
    service.delete_container(name)


class TestLiveBlockBlobs:
    """Block blob behaviour against a live service."""

    def test_round_trip(self, service, container, tmp_path):
        """Test that downloaded bytes equal uploaded bytes."""
        payload = os.urandom(4096)
        source = tmp_path / "payload.bin"
        source.write_bytes(payload)
        target = tmp_path / "CopyOfpayload.bin"

        service.upload_file(container, "payload.bin", str(source))
        service.download_to_file(container, "payload.bin", str(target))

        assert target.read_bytes() == payload

    def test_listing_is_exact(self, service, container, tmp_path):
        """Test that a listing holds exactly the blobs created here."""
        source = tmp_path / "a.txt"
        source.write_bytes(b"a")
        for name in ["a.txt", "b.txt", "docs/c.txt"]:
            service.upload_file(container, name, str(source))

        listing = service.list_blobs(container)

        assert sorted((blob.name, blob.kind) for blob in listing) == [
            ("a.txt", BlobKind.BLOCK),
            ("b.txt", BlobKind.BLOCK),
            ("docs/", BlobKind.DIRECTORY),
        ]

    def test_delete_includes_snapshots(self, service, container, tmp_path):
        """Test that deleting with snapshots leaves nothing behind."""
        source = tmp_path / "a.txt"
        source.write_bytes(b"a")
        service.upload_file(container, "a.txt", str(source))
        service.create_snapshot(container, "a.txt")

        assert service.delete_blob(container, "a.txt", include_snapshots=True)

        container_client = service.get_container_client(container)
        assert list(container_client.list_blobs(include=["snapshots"])) == []


class TestLivePageBlobs:
    """Page blob behaviour against a live service."""

    def test_write_and_read_page(self, service, container):
        page = os.urandom(512)

        service.create_page_blob(container, "samplepageblob", 1024)
        service.upload_pages(container, "samplepageblob", page)

        assert service.download_range(container, "samplepageblob", 0, 512) == page

    def test_segmented_listing(self, service, container):
        for index in range(3):
            service.create_page_blob(container, f"page{index}", 512)

        segments = list(service.list_blobs_segmented(container, max_results=2))

        assert [len(segment) for segment in segments] == [2, 1]
        assert all(blob.kind is BlobKind.PAGE for segment in segments for blob in segment)


class TestLiveAccountSas:
    """Account SAS expiry against a live service."""

    def test_token_accepted_before_expiry(self, account, container):
        token = get_account_sas_token(account, AccountSasPolicy.for_hours(1))
        sas_service = BlobService(
            account=StorageAccount.from_sas_token(token, account.blob_endpoint, account.account_name)
        )

        assert sas_service.list_blobs(container) == []

    def test_token_rejected_after_expiry(self, account, container):
        expired = AccountSasPolicy(expiry=datetime.now(timezone.utc) - timedelta(minutes=5))
        token = get_account_sas_token(account, expired)
        sas_service = BlobService(
            account=StorageAccount.from_sas_token(token, account.blob_endpoint, account.account_name)
        )

        with pytest.raises(HttpResponseError):
            sas_service.list_blobs(container)
