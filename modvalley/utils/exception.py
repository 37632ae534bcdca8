class ModValleyError(Exception):
    """
    Base class for every error raised at the boundary of a user action.
    """

    pass


class DetectionFailure(ModValleyError):
    """
    Raised when the Stardew Valley installation or its Mods folder
    cannot be located
    """

    pass


class ScanFailure(ModValleyError):
    """
    Raised when the Mods folder or a mod manifest cannot be read
    """

    pass


class RemoteFailure(ModValleyError):
    """
    Raised when a batch or single update check fails in transport or parsing
    """

    pass


class OverrideFailure(ModValleyError):
    """
    Raised when the manifest writer is unable to record a new version
    """

    pass


class LaunchFailure(ModValleyError):
    """
    Raised when opening a path or an external link fails
    """

    pass


class RateLimitWarning(ModValleyError):
    """
    Raised when an update check is requested inside the API quota window
    without prior user confirmation
    """

    pass


class WorkflowUnavailable(ModValleyError):
    pass


class WorkflowStepError(ModValleyError):
    pass


class WorkflowBusy(ModValleyError):
    pass


class CacheWriteFailure(ModValleyError):
    """
    Raised when the update cache cannot be written to the client store
    """

    pass
