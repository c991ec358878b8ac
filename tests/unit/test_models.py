"""
Unit tests for domain models.

Tests verify:
- UUID generation format and randomness
- One-key-per-device merge invariant
- Key validation
- JSON serialization of DeviceKey and Account
"""

import json
import re

import pytest

from src.domain.models import Account, DeviceKey, generate_uuid

UUID4_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


class TestGenerateUuid:
    """Tests for generate_uuid."""

    def test_matches_version_4_layout(self) -> None:
        """Generated ids have version 4 and RFC 4122 variant bits."""
        for _ in range(50):
            assert UUID4_PATTERN.match(generate_uuid())

    def test_values_vary(self) -> None:
        """Generated ids are unique across calls."""
        assert len({generate_uuid() for _ in range(100)}) == 100


class TestAccountMerge:
    """Tests for Account.set_key and the one-key-per-device invariant."""

    def test_set_key_adds_new_device(self) -> None:
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "k1"))
        account.set_key(DeviceKey("a@b.com", "laptop", "k2"))

        assert [k.device_name for k in account.keys] == ["phone", "laptop"]

    def test_set_key_replaces_same_device(self) -> None:
        """A key for an existing device name replaces only that key."""
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "k1"))
        account.set_key(DeviceKey("a@b.com", "laptop", "k2"))
        account.set_key(DeviceKey("a@b.com", "phone", "k3"))

        assert len(account.keys) == 2
        assert account.key_for_device("phone").key == "k3"
        assert account.key_for_device("laptop").key == "k2"

    def test_set_same_key_twice_is_noop(self) -> None:
        account = Account(email="a@b.com")
        key = DeviceKey("a@b.com", "phone", "k1")
        account.set_key(key)
        account.set_key(key)

        assert account.keys == [key]

    def test_invariant_holds_after_many_merges(self) -> None:
        """At most one key per device name after an arbitrary merge sequence."""
        account = Account(email="a@b.com")
        devices = ["phone", "laptop", "tablet", "phone", "phone", "tablet", "desktop"]
        for i, device in enumerate(devices):
            account.set_key(DeviceKey("a@b.com", device, f"k{i}"))

        names = [k.device_name for k in account.keys]
        assert len(names) == len(set(names)) == 4

    def test_key_for_unknown_device_is_none(self) -> None:
        assert Account(email="a@b.com").key_for_device("phone") is None

    def test_remove_key_for_device(self) -> None:
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "k1"))
        account.remove_key_for_device("phone")
        assert account.keys == []


class TestAccountValidate:
    """Tests for Account.validate."""

    def test_matching_key_is_valid(self) -> None:
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "k1"))
        account.set_key(DeviceKey("a@b.com", "laptop", "k2"))

        assert account.validate("k1")
        assert account.validate("k2")

    def test_unknown_key_is_invalid(self) -> None:
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "k1"))

        assert not account.validate("k2")
        assert not account.validate("")

    def test_account_without_keys_rejects_everything(self) -> None:
        assert not Account(email="a@b.com").validate("anything")

    def test_replaced_key_is_no_longer_valid(self) -> None:
        account = Account(email="a@b.com")
        account.set_key(DeviceKey("a@b.com", "phone", "old"))
        account.set_key(DeviceKey("a@b.com", "phone", "new"))

        assert not account.validate("old")
        assert account.validate("new")


class TestSerialization:
    """Tests for JSON encoding of stored records."""

    def test_device_key_json_fields(self) -> None:
        """DeviceKey is stored with email, device_name and key fields."""
        data = json.loads(DeviceKey("a@b.com", "phone", "k1").to_json())
        assert data == {"email": "a@b.com", "device_name": "phone", "key": "k1"}

    def test_account_json_fields(self) -> None:
        account = Account(email="a@b.com", keys=[DeviceKey("a@b.com", "phone", "k1")], version=3)
        data = json.loads(account.to_json())
        assert data == {
            "email": "a@b.com",
            "keys": [{"email": "a@b.com", "device_name": "phone", "key": "k1"}],
            "version": 3,
        }

    def test_account_decodes_stored_record(self) -> None:
        raw = b'{"email": "a@b.com", "keys": [{"email": "a@b.com", "device_name": "phone", "key": "k1"}], "version": 2}'
        account = Account.from_json(raw)
        assert account.email == "a@b.com"
        assert account.keys == [DeviceKey("a@b.com", "phone", "k1")]
        assert account.version == 2

    def test_account_version_defaults_to_zero(self) -> None:
        assert Account.from_json(b'{"email": "a@b.com", "keys": []}').version == 0

    @pytest.mark.parametrize(
        "raw",
        [
            b"not json",
            b"[]",
            b'{"keys": []}',
            b'{"email": "a@b.com", "keys": {}}',
            b'{"email": "a@b.com", "keys": [{"email": "a@b.com"}]}',
            b'{"email": "a@b.com", "keys": [], "version": "1"}',
            b"\xff\xfe",
        ],
    )
    def test_account_rejects_malformed_records(self, raw: bytes) -> None:
        with pytest.raises(ValueError):
            Account.from_json(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"null",
            b'{"email": "a@b.com", "device_name": "phone"}',
            b'{"email": "a@b.com", "device_name": 1, "key": "k"}',
        ],
    )
    def test_device_key_rejects_malformed_records(self, raw: bytes) -> None:
        with pytest.raises(ValueError):
            DeviceKey.from_json(raw)
