"""
Secure keyring manager for storing sensitive information like API keys.
Provides a unified interface for Windows Credential Manager, macOS Keychain, and Linux keyring.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError
from loguru import logger

from modvalley.utils.constants import APP_NAME


class KeyringManager:
    """
    Manages secure storage of secrets using the system keyring/credential store.
    Reports itself unavailable when no working backend is found, in which case
    callers keep the secret in plaintext settings.
    """

    SERVICE_NAME = APP_NAME

    # Secret types
    NEXUS_API_KEY = "nexus_api_key"

    def __init__(self) -> None:
        """Initialize the KeyringManager and check keyring availability."""
        self._available = True
        try:
            backend = keyring.get_keyring()
            logger.debug(f"Using keyring backend: {backend.__class__.__name__}")
            # The fail backend is selected when nothing usable is installed
            if backend.priority <= 0:
                self._available = False
        except Exception as e:
            logger.warning(f"Keyring backend not working: {e}")
            self._available = False

        if not self._available:
            logger.warning("Keyring not available, secrets will be stored in plaintext")

    def is_available(self) -> bool:
        """Check if secure keyring storage is available."""
        return self._available

    def store_secret(self, secret_type: str, username: str, secret: str) -> bool:
        """
        Store a secret in the system keyring.

        Args:
            secret_type: Type of secret (e.g., NEXUS_API_KEY)
            username: Username or identifier associated with the secret
            secret: The secret value to store

        Returns:
            True if successfully stored, False otherwise
        """
        if not self._available:
            return False

        try:
            keyring.set_password(self._service_name(secret_type), username, secret)
            return True
        except KeyringError as e:
            logger.warning(f"Unable to store {secret_type} in keyring: {e}")
            return False

    def get_secret(self, secret_type: str, username: str) -> Optional[str]:
        """
        Retrieve a secret from the system keyring.

        Args:
            secret_type: Type of secret (e.g., NEXUS_API_KEY)
            username: Username or identifier associated with the secret

        Returns:
            The secret value if found, None otherwise
        """
        if not self._available:
            return None

        try:
            return keyring.get_password(self._service_name(secret_type), username)
        except KeyringError as e:
            logger.warning(f"Unable to read {secret_type} from keyring: {e}")
            return None

    def delete_secret(self, secret_type: str, username: str) -> bool:
        """
        Delete a secret from the system keyring.

        Returns:
            True if successfully deleted, False otherwise
        """
        if not self._available:
            return False

        try:
            keyring.delete_password(self._service_name(secret_type), username)
            return True
        except KeyringError:
            return False

    def _service_name(self, secret_type: str) -> str:
        return f"{self.SERVICE_NAME}_{secret_type}"


# Global instance
_keyring_manager = None


def get_keyring_manager() -> KeyringManager:
    """Get the global KeyringManager instance."""
    global _keyring_manager
    if _keyring_manager is None:
        _keyring_manager = KeyringManager()
    return _keyring_manager
