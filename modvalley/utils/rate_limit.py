from modvalley.utils.constants import RATE_LIMIT_WINDOW_MS


def should_warn(now: int, last_check: int | None, credential_configured: bool) -> bool:
    """
    Decide whether a new batch check needs explicit user confirmation.

    The remote quota is only enforced for requests carrying an API key, so
    unauthenticated checks are never throttled here.

    :param now: current time, epoch milliseconds
    :param last_check: time of the last completed batch check, or None if never checked
    :param credential_configured: whether an API key is configured
    :return: True if the last check happened less than an hour ago with a key configured
    """
    if last_check is None or not credential_configured:
        return False
    return now - last_check < RATE_LIMIT_WINDOW_MS
