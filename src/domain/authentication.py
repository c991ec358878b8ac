"""
Authentication gate - Resolves 'ApiKey <email>:<key>' credentials to accounts.

All failures after the header parses (unknown account, wrong key) raise
the same AuthenticationFailed so callers cannot tell which emails have
accounts. When the account is missing a dummy key comparison still runs.
"""

import re
import secrets
from dataclasses import dataclass

from .accounts import AccountRepository
from .exceptions import AuthenticationFailed, MalformedAuthHeader
from .models import Account, generate_uuid

# Greedy email group: the split happens at the last colon
AUTH_HEADER_PATTERN = re.compile(r"ApiKey (?P<email>.+):(?P<key>.+)")

_DUMMY_KEY = generate_uuid()


def parse_auth_header(header: str | None) -> tuple[str, str]:
    """
    Split an Authorization header into (email, key).

    No character-set restriction applies to either part.

    Raises:
        MalformedAuthHeader: If the header is missing or not of the form
            'ApiKey <email>:<key>'
    """
    match = AUTH_HEADER_PATTERN.fullmatch(header or "")
    if match is None:
        raise MalformedAuthHeader("No valid authorization header provided")
    return match.group("email"), match.group("key")


@dataclass
class AuthenticationGate:
    """Validates API key credentials against stored accounts."""

    accounts: AccountRepository

    def authenticate(self, header: str | None) -> Account:
        """
        Resolve the account for an Authorization header.

        Returns:
            The authenticated Account

        Raises:
            MalformedAuthHeader: Header does not parse (no storage access)
            AuthenticationFailed: Unknown account or invalid key
            StorageError: Account could not be read
        """
        email, key = parse_auth_header(header)

        account = self.accounts.load(email)
        if account is None:
            secrets.compare_digest(_DUMMY_KEY.encode(), key.encode())
            raise AuthenticationFailed("Invalid credentials")

        if not account.validate(key):
            raise AuthenticationFailed("Invalid credentials")

        return account
