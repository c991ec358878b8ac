"""
Domain models - Device keys and accounts.

An Account is identified by its email and holds one DeviceKey per device
name. Both serialize to JSON for storage in the key-value store:

    DeviceKey: {"email": ..., "device_name": ..., "key": ...}
    Account:   {"email": ..., "keys": [DeviceKey, ...], "version": n}
"""

import json
import secrets
from dataclasses import asdict, dataclass, field


def generate_uuid() -> str:
    """
    Generate an RFC 4122 version-4 UUID string from a secure random source.

    Version bits are fixed to 4 and variant bits to 10xx; the remaining
    122 bits come from the secrets module.
    """
    b = bytearray(secrets.token_bytes(16))
    b[6] = (b[6] & 0x0F) | 0x40
    b[8] = (b[8] & 0x3F) | 0x80
    h = b.hex()
    return f"{h[0:8]}-{h[8:12]}-{h[12:16]}-{h[16:20]}-{h[20:32]}"


@dataclass(frozen=True)
class DeviceKey:
    """An API key bound to one device of an account."""

    email: str
    device_name: str
    key: str

    def to_json(self) -> bytes:
        return json.dumps(asdict(self)).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "DeviceKey":
        """
        Decode a serialized DeviceKey.

        Raises:
            ValueError: If data is not a JSON object with string fields
                email, device_name and key
        """
        return cls.from_dict(json.loads(data))

    @classmethod
    def from_dict(cls, obj: object) -> "DeviceKey":
        if not isinstance(obj, dict):
            raise ValueError("device key record is not a JSON object")
        try:
            fields = {name: obj[name] for name in ("email", "device_name", "key")}
        except KeyError as e:
            raise ValueError(f"device key record is missing {e}") from None
        if not all(isinstance(value, str) for value in fields.values()):
            raise ValueError("device key fields must be strings")
        return cls(**fields)


@dataclass
class Account:
    """
    A user identified by email, holding a set of device keys.

    Invariant: at most one DeviceKey per distinct device_name.
    The version is bumped by the repository on every save.
    """

    email: str
    keys: list[DeviceKey] = field(default_factory=list)
    version: int = 0

    def key_for_device(self, device_name: str) -> DeviceKey | None:
        for device_key in self.keys:
            if device_key.device_name == device_name:
                return device_key
        return None

    def remove_key_for_device(self, device_name: str) -> None:
        self.keys = [k for k in self.keys if k.device_name != device_name]

    def set_key(self, device_key: DeviceKey) -> None:
        """Add a key, replacing any key already registered for the same device."""
        self.remove_key_for_device(device_key.device_name)
        self.keys.append(device_key)

    def validate(self, key: str) -> bool:
        """
        Check whether key belongs to any device of this account.

        Compares against every key with secrets.compare_digest and does
        not stop at the first match, so timing does not reveal which
        device (or how many) the account has.
        """
        candidate = key.encode()
        matched = False
        for device_key in self.keys:
            if secrets.compare_digest(device_key.key.encode(), candidate):
                matched = True
        return matched

    def to_json(self) -> bytes:
        return json.dumps(
            {
                "email": self.email,
                "keys": [asdict(k) for k in self.keys],
                "version": self.version,
            }
        ).encode()

    @classmethod
    def from_json(cls, data: bytes) -> "Account":
        """
        Decode a serialized Account.

        Raises:
            ValueError: If data is not a well-formed account record
        """
        obj = json.loads(data)
        if not isinstance(obj, dict) or not isinstance(obj.get("email"), str):
            raise ValueError("account record has no email")
        keys = obj.get("keys", [])
        if not isinstance(keys, list):
            raise ValueError("account keys must be a list")
        version = obj.get("version", 0)
        if not isinstance(version, int):
            raise ValueError("account version must be an integer")
        return cls(
            email=obj["email"],
            keys=[DeviceKey.from_dict(k) for k in keys],
            version=version,
        )
