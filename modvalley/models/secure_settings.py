"""
Secure settings model that uses keyring for sensitive data storage.
"""

from loguru import logger

from modvalley.models.settings import Settings
from modvalley.utils.keyring_manager import KeyringManager, get_keyring_manager


class SecureSettings:
    """
    Handles secure storage and retrieval of the Nexus Mods API key.
    Uses system keyring when available, falls back to plaintext storage in settings.json.
    """

    def __init__(
        self, settings: Settings, keyring_manager: KeyringManager | None = None
    ) -> None:
        self.settings = settings
        self.keyring_manager = keyring_manager or get_keyring_manager()

    def get_nexus_api_key(self, username: str = "default") -> str:
        """Get the Nexus API key, or an empty string if none is configured."""
        if self.keyring_manager.is_available():
            secret = self.keyring_manager.get_secret(
                KeyringManager.NEXUS_API_KEY, username
            )
            if secret:
                return secret
        # Plaintext copy is only kept when the keyring refused to store the key
        return self.settings.nexus_api_key

    def set_nexus_api_key(self, api_key: str, username: str = "default") -> None:
        """Store the Nexus API key. An empty key removes it."""
        if self.keyring_manager.is_available():
            if api_key:
                stored = self.keyring_manager.store_secret(
                    KeyringManager.NEXUS_API_KEY, username, api_key
                )
            else:
                self.keyring_manager.delete_secret(
                    KeyringManager.NEXUS_API_KEY, username
                )
                stored = True
            if stored:
                # Never keep a plaintext copy once the keyring holds the key
                if self.settings.nexus_api_key:
                    self.settings.nexus_api_key = ""
                    self.settings.save()
                return
            logger.warning("Falling back to plaintext storage for the Nexus API key")

        self.settings.nexus_api_key = api_key
        self.settings.save()

    def migrate_from_plaintext_settings(self) -> bool:
        """Move a plaintext API key from settings.json into the keyring."""
        plaintext = self.settings.nexus_api_key
        if not plaintext or not self.keyring_manager.is_available():
            return False
        if self.keyring_manager.store_secret(
            KeyringManager.NEXUS_API_KEY, "default", plaintext
        ):
            self.settings.nexus_api_key = ""
            self.settings.save()
            logger.info("Migrated Nexus API key from settings.json to keyring")
            return True
        return False
