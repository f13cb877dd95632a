"""
Tests for the error classifier.
"""

from types import SimpleNamespace

import httpx

from repo_integrations.domain.entities import ErrorInfo, RateLimitSnapshot
from repo_integrations.domain.exceptions import RepositoryNotFoundError, UpstreamError
from repo_integrations.services.error_classifier import classify


class Unusual(Exception):
    """An exception whose attributes blow up when read."""

    @property
    def headers(self):
        raise RuntimeError("no headers for you")


class TestClassify:
    """Test failure-to-data conversion."""

    def test_error_with_headers(self):
        """Test that error attributes and the rate-limit headers are both kept."""
        error = RepositoryNotFoundError(
            "m",
            code=404,
            status="Not Found",
            headers={
                "x-ratelimit-limit": 60,
                "x-ratelimit-remaining": 59,
                "x-ratelimit-reset": 123456,
            },
        )

        result = classify(error)

        assert result.error_info == ErrorInfo(code=404, status="Not Found", message="m")
        assert result.rate_limit == RateLimitSnapshot(limit=60, remaining=59, reset_at=123456)

    def test_error_without_headers(self):
        """Test that an error without headers yields the empty snapshot."""
        result = classify(UpstreamError("m", code=500, status="Internal Server Error"))

        assert result.rate_limit.is_empty
        assert result.error_info.code == 500

    def test_missing_fields_stay_absent(self):
        """Test that absent attributes are None rather than sentinel values."""
        result = classify(UpstreamError(code=502))

        assert result.error_info == ErrorInfo(code=502, status=None, message=None)

    def test_plain_object_shape(self):
        """Test that any exception carrying the attributes is understood."""
        error = Exception("ignored")
        error.code = 404
        error.status = "Not Found"
        error.message = "Not Found Error"
        error.headers = {"x-ratelimit-limit": "60", "x-ratelimit-remaining": "0"}

        result = classify(error)

        assert result.error_info == ErrorInfo(code=404, status="Not Found", message="Not Found Error")
        assert result.rate_limit == RateLimitSnapshot(limit=60, remaining=0, reset_at=None)

    def test_generic_exception(self):
        """Test that a bare exception still yields its message."""
        result = classify(RuntimeError("connection reset"))

        assert result.error_info == ErrorInfo(message="connection reset")
        assert result.rate_limit.is_empty

    def test_httpx_status_error(self):
        """Test that the response attached to an httpx error is read."""
        request = httpx.Request("GET", "https://api.github.com/repos/gsa/x")
        response = httpx.Response(
            403,
            headers={"x-ratelimit-limit": "60", "x-ratelimit-remaining": "0", "x-ratelimit-reset": "99"},
            request=request,
        )
        error = httpx.HTTPStatusError("forbidden", request=request, response=response)

        result = classify(error)

        assert result.error_info.code == 403
        assert result.error_info.status == "Forbidden"
        assert result.rate_limit == RateLimitSnapshot(limit=60, remaining=0, reset_at=99)

    def test_malformed_error_never_raises(self):
        """Test that unreadable attributes do not escape the classifier."""
        error = Unusual()
        error.code = "not-a-number"

        result = classify(error)

        assert result.error_info.code is None
        assert result.rate_limit.is_empty

    def test_non_mapping_headers(self):
        """Test that headers of the wrong type are ignored."""
        error = Exception("x")
        error.headers = SimpleNamespace(limit=1)

        assert classify(error).rate_limit.is_empty

    def test_idempotent(self):
        """Test that classifying the same error twice gives identical output."""
        error = RepositoryNotFoundError(
            "Not Found", code=404, status="Not Found", headers={"x-ratelimit-limit": "60"}
        )

        assert classify(error) == classify(error)
