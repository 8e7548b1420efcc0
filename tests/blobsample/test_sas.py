"""
Tests for the shared access signature helpers.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from src.blobsample.models import AccountSasPolicy, SasToken
from src.blobsample.storage.account import StorageAccount
from src.blobsample.storage.sas import (
    build_account_sas_policy,
    get_account_sas_token,
    get_container_uri,
    parse_sas_token,
)

VALID_KEY = "dGVzdC1hY2NvdW50LWtleQ=="


@pytest.fixture
def key_account():
    """Account handle holding an account key."""
    return StorageAccount.from_connection_string(
        f"AccountName=demo;AccountKey={VALID_KEY}"
    )


class TestContainerUri:
    """Tests for get_container_uri."""

    def test_joins_endpoint_and_name(self, key_account):
        """Test the URI layout."""
        uri = get_container_uri(key_account, "democontainer")

        assert uri == "https://demo.blob.core.windows.net/democontainer"

    def test_emulator_endpoint(self):
        """Test the URI for the emulator's path-style endpoint."""
        account = StorageAccount.from_connection_string("UseDevelopmentStorage=true")

        uri = get_container_uri(account, "democontainer")

        assert uri == "http://127.0.0.1:10000/devstoreaccount1/democontainer"

    def test_empty_name_rejected(self, key_account):
        """Test that a container name is required."""
        with pytest.raises(ValueError):
            get_container_uri(key_account, "")


class TestAccountSasPolicy:
    """Tests for the demo access policy."""

    def test_default_policy(self):
        """Test permissions, scope, protocol and 24 hour expiry."""
        before = datetime.now(timezone.utc)
        policy = build_account_sas_policy()
        after = datetime.now(timezone.utc)

        assert policy.read and policy.write and policy.list
        assert policy.create and policy.delete
        assert policy.container and policy.object
        assert policy.service
        assert policy.protocol == "https,http"
        assert before + timedelta(hours=24) <= policy.expiry <= after + timedelta(hours=24)

    def test_custom_lifetime(self):
        """Test a policy with an explicit reference time."""
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)

        policy = AccountSasPolicy.for_hours(2, now=now)

        assert policy.expiry == datetime(2026, 1, 1, 2, tzinfo=timezone.utc)

    def test_non_positive_lifetime_rejected(self):
        """Test that a token must live for some time."""
        with pytest.raises(ValueError):
            build_account_sas_policy(0)


class TestGetAccountSasToken:
    """Tests for get_account_sas_token."""

    @patch("src.blobsample.storage.sas.generate_account_sas")
    def test_passes_policy_to_sdk(self, mock_generate, key_account):
        """Test that the policy maps onto the SDK arguments."""
        mock_generate.return_value = "sv=x&sig=y"
        policy = build_account_sas_policy(24)

        token = get_account_sas_token(key_account, policy)

        assert token == "sv=x&sig=y"
        kwargs = mock_generate.call_args.kwargs
        assert kwargs["account_name"] == "demo"
        assert kwargs["account_key"] == VALID_KEY
        assert kwargs["expiry"] == policy.expiry
        assert kwargs["protocol"] == "https,http"
        assert str(kwargs["permission"]) == "rwdlc"
        assert str(kwargs["resource_types"]) == "co"
        assert str(kwargs["services"]) == "b"

    def test_requires_account_key(self):
        """Test that a SAS-only account cannot sign a new SAS."""
        account = StorageAccount.from_sas_token(
            "sv=x&sig=y", "https://demo.blob.core.windows.net"
        )

        with pytest.raises(ValueError, match="no account key"):
            get_account_sas_token(account)

    def test_generated_token_round_trips_through_parser(self, key_account):
        """Test a token signed by the SDK."""
        policy = AccountSasPolicy.for_hours(
            24, now=datetime(2026, 1, 1, tzinfo=timezone.utc)
        )

        token = parse_sas_token(get_account_sas_token(key_account, policy))

        assert token.signature
        assert token.permissions == "rwdlc"
        assert token.protocol == "https,http"
        assert token.expires_on == datetime(2026, 1, 2, tzinfo=timezone.utc)


class TestSasTokenExpiry:
    """Tests for SAS token validity around its expiry time."""

    @pytest.fixture
    def token(self):
        return SasToken.parse(
            "?sv=2021-08-06&ss=b&srt=co&sp=rwdlc"
            "&se=2026-01-02T00:00:00Z&st=2026-01-01T00:00:00Z&spr=https,http&sig=abc%3D"
        )

    def test_fields(self, token):
        """Test the parsed fields."""
        assert token.signature == "abc="
        assert token.permissions == "rwdlc"
        assert token.starts_on == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert str(token).startswith("sv=")

    def test_valid_before_expiry(self, token):
        """Test that the token is accepted just before it expires."""
        moment = datetime(2026, 1, 1, 23, 59, 59, tzinfo=timezone.utc)

        assert token.is_valid_at(moment)

    def test_invalid_at_expiry(self, token):
        """Test that the token is rejected at its expiry time."""
        assert not token.is_valid_at(datetime(2026, 1, 2, tzinfo=timezone.utc))

    def test_invalid_after_expiry(self, token):
        """Test that the token is rejected after its expiry time."""
        assert not token.is_valid_at(datetime(2026, 1, 3, tzinfo=timezone.utc))

    def test_invalid_before_start(self, token):
        """Test that the token is rejected before its start time."""
        assert not token.is_valid_at(datetime(2025, 12, 31, tzinfo=timezone.utc))

    def test_naive_moment_treated_as_utc(self, token):
        """Test that naive datetimes are read as UTC."""
        assert token.is_valid_at(datetime(2026, 1, 1, 12))

    @pytest.mark.parametrize("value", ["se=2026-01-02T00:00:00Z", "sig=abc", ""])
    def test_incomplete_tokens_rejected(self, value):
        """Test that a token needs both a signature and an expiry."""
        with pytest.raises(ValueError):
            SasToken.parse(value)
