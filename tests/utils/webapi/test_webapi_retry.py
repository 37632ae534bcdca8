"""
Tests for web API retry logic.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from modvalley.utils.webapi.retry import (
    WebAPIRetryConfig,
    api_request_with_retry,
    retry_api_call,
    should_retry_exception,
)


def _http_error(status_code: int) -> requests.HTTPError:
    response = Mock()
    response.status_code = status_code
    return requests.HTTPError(response=response)


class TestShouldRetryException:
    """Tests for should_retry_exception function."""

    @pytest.mark.parametrize("status_code", [500, 502, 503, 504])
    def test_retry_on_server_errors(self, status_code: int) -> None:
        assert should_retry_exception(_http_error(status_code), WebAPIRetryConfig())

    def test_no_retry_on_429(self) -> None:
        """A spent quota is not fixed by asking again."""
        assert not should_retry_exception(_http_error(429), WebAPIRetryConfig())

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404])
    def test_no_retry_on_client_errors(self, status_code: int) -> None:
        assert not should_retry_exception(_http_error(status_code), WebAPIRetryConfig())

    def test_http_error_without_response(self) -> None:
        assert not should_retry_exception(requests.HTTPError(), WebAPIRetryConfig())

    def test_timeout_follows_config(self) -> None:
        exc = requests.Timeout()
        assert should_retry_exception(exc, WebAPIRetryConfig(retry_on_timeout=True))
        assert not should_retry_exception(
            exc, WebAPIRetryConfig(retry_on_timeout=False)
        )

    def test_connection_error_follows_config(self) -> None:
        exc = requests.ConnectionError()
        assert should_retry_exception(
            exc, WebAPIRetryConfig(retry_on_connection_error=True)
        )
        assert not should_retry_exception(
            exc, WebAPIRetryConfig(retry_on_connection_error=False)
        )

    def test_other_exceptions_not_retried(self) -> None:
        assert not should_retry_exception(ValueError("bad"), WebAPIRetryConfig())


class TestRetryDecorator:
    """Tests for retry_api_call decorator."""

    def test_successful_call_no_retry(self) -> None:
        call_count = 0

        @retry_api_call(config=WebAPIRetryConfig(max_retries=3))
        def successful_function() -> str:
            nonlocal call_count
            call_count += 1
            return "success"

        assert successful_function() == "success"
        assert call_count == 1

    def test_transient_503_with_successful_retry(self) -> None:
        call_count = 0

        @retry_api_call(config=WebAPIRetryConfig(max_retries=3, backoff_factor=0.01))
        def flaky_function() -> str:
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise _http_error(503)
            return "success"

        assert flaky_function() == "success"
        assert call_count == 3  # Initial + 2 retries

    def test_max_retries_exceeded(self) -> None:
        call_count = 0

        @retry_api_call(config=WebAPIRetryConfig(max_retries=2, backoff_factor=0.01))
        def always_failing_function() -> str:
            nonlocal call_count
            call_count += 1
            raise _http_error(503)

        with pytest.raises(requests.HTTPError):
            always_failing_function()

        assert call_count == 3  # Initial + 2 retries

    def test_429_fails_immediately(self) -> None:
        call_count = 0

        @retry_api_call(config=WebAPIRetryConfig(max_retries=3, backoff_factor=0.01))
        def quota_spent() -> str:
            nonlocal call_count
            call_count += 1
            raise _http_error(429)

        with pytest.raises(requests.HTTPError):
            quota_spent()

        assert call_count == 1

    def test_backoff_delays(self) -> None:
        config = WebAPIRetryConfig(max_retries=2, backoff_factor=0.5)

        @retry_api_call(config=config)
        def failing_function() -> str:
            raise requests.Timeout()

        with patch("modvalley.utils.webapi.retry.time.sleep") as mock_sleep:
            with pytest.raises(requests.Timeout):
                failing_function()

        assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]


class TestApiRequestWithRetry:
    """Tests for api_request_with_retry helper function."""

    @patch("modvalley.utils.webapi.retry.requests.post")
    def test_successful_post_request(self, mock_post: Mock) -> None:
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.raise_for_status.return_value = None
        mock_post.return_value = mock_response

        result = api_request_with_retry(
            "POST",
            "https://smapi.io/api/v3.0/mods",
            json={"mods": []},
            headers={"Accept": "application/json"},
        )

        assert result == mock_response
        mock_post.assert_called_once_with(
            "https://smapi.io/api/v3.0/mods",
            json={"mods": []},
            headers={"Accept": "application/json"},
            timeout=30,
        )

    @patch("modvalley.utils.webapi.retry.requests.get")
    def test_get_request_retries_on_503(self, mock_get: Mock) -> None:
        bad_response = Mock()
        bad_response.raise_for_status.side_effect = _http_error(503)
        good_response = Mock()
        good_response.raise_for_status.return_value = None
        mock_get.side_effect = [bad_response, good_response]

        result = api_request_with_retry(
            "GET",
            "https://api.nexusmods.com/v1/games/stardewvalley/mods/1.json",
            config=WebAPIRetryConfig(max_retries=2, backoff_factor=0.01),
        )

        assert result == good_response
        assert mock_get.call_count == 2

    def test_unsupported_method(self) -> None:
        with pytest.raises(ValueError):
            api_request_with_retry("DELETE", "https://smapi.io")
