import pytest

from modvalley.utils.constants import RATE_LIMIT_WINDOW_MS
from modvalley.utils.rate_limit import should_warn

NOW = 1_700_000_000_000


@pytest.mark.parametrize(
    "last_check, credential_configured, expected",
    [
        (None, True, False),
        (None, False, False),
        (NOW - 1000, False, False),
        (NOW - 1000, True, True),
        (NOW - (RATE_LIMIT_WINDOW_MS - 1), True, True),
        (NOW - RATE_LIMIT_WINDOW_MS, True, False),
        (NOW - 2 * RATE_LIMIT_WINDOW_MS, True, False),
    ],
)
def test_should_warn(
    last_check: int | None, credential_configured: bool, expected: bool
) -> None:
    assert should_warn(NOW, last_check, credential_configured) is expected
