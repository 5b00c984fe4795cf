"""Tests for retry and error classification utilities."""

import pytest

from podtally.utils.retry import (
    TEST_RETRY_CONFIG,
    InvalidRequestError,
    NetworkConnectionError,
    NetworkTimeoutError,
    NonRetryableError,
    RateLimitError,
    RetryableError,
    RetryConfig,
    ServerError,
    classify_http_error,
    with_retry,
)


# Pytest fixture to use fast retry config in tests
@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("podtally.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


class TestErrorClassification:
    """Test error classification."""

    def test_retryable_errors(self):
        """Test retryable error types."""
        for error_type in (RateLimitError, NetworkTimeoutError, NetworkConnectionError, ServerError):
            assert issubclass(error_type, RetryableError)

    def test_non_retryable_errors(self):
        """Test non-retryable error types."""
        assert issubclass(InvalidRequestError, NonRetryableError)
        assert not issubclass(InvalidRequestError, RetryableError)


class TestClassifyHttpError:
    """Test HTTP error classification."""

    def test_rate_limit_429(self):
        """Test 429 classified as rate limit."""
        error = classify_http_error(429, "Too many requests")
        assert isinstance(error, RateLimitError)
        assert "Rate limited" in str(error)
        assert error.status_code == 429

    def test_server_errors_5xx(self):
        """Test 5xx classified as server errors."""
        for status_code in [500, 502, 503, 504]:
            error = classify_http_error(status_code, "Server error")
            assert isinstance(error, ServerError)
            assert error.status_code == status_code

    def test_timeout_408(self):
        """Test 408 classified as timeout."""
        error = classify_http_error(408, "Request timeout")
        assert isinstance(error, NetworkTimeoutError)

    def test_client_errors_4xx(self):
        """Test other 4xx classified as invalid request."""
        for status_code in [400, 401, 403, 404, 410]:
            error = classify_http_error(status_code, "Bad request")
            assert isinstance(error, InvalidRequestError)

    def test_unknown_error(self):
        """Test unknown status codes classified as non-retryable."""
        error = classify_http_error(999, "Unknown error")
        assert isinstance(error, NonRetryableError)
        assert not isinstance(error, InvalidRequestError)


class TestRetryConfig:
    """Test retry configuration."""

    def test_default_config(self):
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.max_wait_seconds == 30
        assert config.min_wait_seconds == 1
        assert config.jitter is True

    def test_custom_config(self):
        """Test custom retry configuration."""
        config = RetryConfig(max_attempts=5, max_wait_seconds=10, min_wait_seconds=2, jitter=False)
        assert config.max_attempts == 5
        assert config.max_wait_seconds == 10
        assert config.min_wait_seconds == 2
        assert config.jitter is False


class TestWithRetryDecorator:
    """Test with_retry decorator."""

    def test_success_no_retry(self):
        """Test successful call doesn't retry."""
        call_count = 0

        @with_retry()
        def successful_call():
            nonlocal call_count
            call_count += 1
            return "success"

        assert successful_call() == "success"
        assert call_count == 1

    def test_retry_on_retryable_error(self):
        """Test retries on retryable errors."""
        call_count = 0

        @with_retry()
        def failing_call():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ServerError("Bad gateway", 502)
            return "success"

        assert failing_call() == "success"
        assert call_count == 3

    def test_no_retry_on_non_retryable_error(self):
        """Test doesn't retry on non-retryable errors."""
        call_count = 0

        @with_retry()
        def missing_feed():
            nonlocal call_count
            call_count += 1
            raise InvalidRequestError("Not found", 404)

        with pytest.raises(InvalidRequestError):
            missing_feed()

        assert call_count == 1

    def test_max_attempts_reached(self):
        """Test the last error is re-raised after max attempts."""
        call_count = 0

        @with_retry(config=RetryConfig(max_attempts=2, max_wait_seconds=0.01, min_wait_seconds=0.01))
        def always_fails():
            nonlocal call_count
            call_count += 1
            raise NetworkConnectionError("Connection refused")

        with pytest.raises(NetworkConnectionError):
            always_fails()

        assert call_count == 2

    def test_custom_retry_on(self):
        """Test custom exception types for retry."""
        call_count = 0

        @with_retry(retry_on=(NetworkTimeoutError,))
        def rate_limit_not_retried():
            nonlocal call_count
            call_count += 1
            raise RateLimitError("Rate limit")

        with pytest.raises(RateLimitError):
            rate_limit_not_retried()

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_async_function(self):
        """Test coroutine functions are retried too."""
        call_count = 0

        @with_retry()
        async def flaky_download():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise NetworkTimeoutError("Timed out")
            return b"<rss/>"

        assert await flaky_download() == b"<rss/>"
        assert call_count == 2

    def test_retry_attempts_are_logged(self, caplog):
        """Test failed attempts are logged before sleeping."""
        caplog.set_level("WARNING", logger="podtally.utils.retry")
        call_count = 0

        @with_retry()
        def flaky():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise RateLimitError("Slow down", 429)
            return "ok"

        flaky()

        assert any("Attempt 1 failed" in record.getMessage() for record in caplog.records)
