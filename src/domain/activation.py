"""
Key activation - Issuing device keys and activating them by token.

Flow:
    1. TokenIssuer.request_key() creates a key/token pair, stores the key
       under the token in the PENDING namespace and emails an activation
       link in the background.
    2. ActivationService.activate() exchanges the token for the key,
       merging it into the account and deleting the pending entry.

Note: request_key() returns the key to the caller before activation.
Activation confirms ownership of the email address; it does not keep the
key secret from whoever requested it.

The pending entry is deleted only after the account write succeeded. If
the delete fails (or the process dies in between) the token stays valid,
and replaying it re-merges an identical key, which changes nothing.
"""

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass

from .accounts import AccountRepository
from .exceptions import StorageError, TokenNotValid
from .models import DeviceKey, generate_uuid
from .ports import EmailSender, KeyValueStore, Namespace

logger = logging.getLogger(__name__)


@dataclass
class TokenIssuer:
    """
    Issues new device keys pending email confirmation.

    Emails are submitted to the executor and never awaited; a failed
    delivery is logged and otherwise ignored.
    """

    store: KeyValueStore
    email_sender: EmailSender
    executor: Executor
    public_url: str | None = None

    def request_key(self, email: str, device_name: str, host: str) -> DeviceKey:
        """
        Create a pending device key and send its activation link.

        Args:
            email: Account email (not validated or normalized)
            device_name: Free-form device label
            host: Request host, used to build the activation link when
                no public_url is configured

        Returns:
            The new, not yet active, DeviceKey

        Raises:
            StorageError: If the pending entry cannot be stored
        """
        device_key = DeviceKey(email=email, device_name=device_name, key=generate_uuid())
        token = generate_uuid()

        self.store.put(Namespace.PENDING, token.encode(), device_key.to_json())

        self._dispatch_email(device_key, self.activation_link(host, token))
        return device_key

    def activation_link(self, host: str, token: str) -> str:
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/activate/{token}"
        return f"http://{host}/activate/{token}"

    def _dispatch_email(self, device_key: DeviceKey, link: str) -> None:
        try:
            future = self.executor.submit(self.email_sender.send_activation_email, device_key, link)
        except RuntimeError as e:
            # Executor already shut down
            logger.warning("Could not schedule activation email to %s: %s", device_key.email, e)
            return

        def log_outcome(f: Future) -> None:
            exc = f.exception()
            if exc is not None:
                logger.warning("Failed to send activation email to %s: %s", device_key.email, exc)

        future.add_done_callback(log_outcome)


@dataclass
class ActivationService:
    """Turns activation tokens into active device keys."""

    store: KeyValueStore
    accounts: AccountRepository

    def activate(self, token: str) -> str:
        """
        Activate the device key stored under token.

        Returns:
            Human readable confirmation naming the device

        Raises:
            TokenNotValid: If no readable pending key exists for token
            StorageError: If the account save or pending delete fails
        """
        device_key = self._pending_key(token)

        self.accounts.merge_key(device_key)
        self.store.delete(Namespace.PENDING, token.encode())

        logger.info("Activated key for %s on device %s", device_key.email, device_key.device_name)
        return f"The api key for the device {device_key.device_name} has been activated!"

    def _pending_key(self, token: str) -> DeviceKey:
        # Every failure mode collapses into TokenNotValid
        try:
            raw = self.store.get(Namespace.PENDING, token.encode())
        except StorageError as e:
            logger.warning("Could not read pending activation: %s", e)
            raise TokenNotValid(token) from e

        if raw is None:
            raise TokenNotValid(token)

        try:
            return DeviceKey.from_json(raw)
        except ValueError as e:
            logger.warning("Unreadable pending activation record: %s", e)
            raise TokenNotValid(token) from e
