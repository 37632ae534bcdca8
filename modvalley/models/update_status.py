import msgspec

from modvalley.utils.constants import MANUAL_CHECK_ONLY


class UpdateStatus(msgspec.Struct, frozen=True, rename="camel"):
    """
    Update state of one mod as last reported by the remote checker.

    Serialized with camelCase keys inside the persisted status map.
    """

    current_version: str
    latest_version: str
    update_available: bool
    download_url: str | None = None

    @property
    def has_download_reference(self) -> bool:
        return bool(self.download_url)

    @property
    def is_manual_check_only(self) -> bool:
        return self.download_url == MANUAL_CHECK_ONLY


StatusMap = dict[str, UpdateStatus]
