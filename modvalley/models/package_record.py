import msgspec


class PackageRecord(msgspec.Struct, frozen=True):
    """
    Descriptor of one installed mod, as read from its manifest.

    Records are produced by the manifest scanner and replaced wholesale
    on every refresh of the mods list.
    """

    folder_name: str
    name: str
    version: str = "Unknown"
    author: str = "Unknown"
    description: str = "No description"
    enabled: bool = True
    update_keys: list[str] = msgspec.field(default_factory=list)
    unique_id: str = ""

    @property
    def is_checkable(self) -> bool:
        """A mod without update keys is never sent to the remote checker."""
        return len(self.update_keys) > 0

    @property
    def remote_id(self) -> str:
        return self.unique_id or self.folder_name
