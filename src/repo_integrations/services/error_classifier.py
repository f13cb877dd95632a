"""Error classifier: turns any remote-call failure into data.

:func:`classify` is the boundary that guarantees failures become values: it
reads whatever attributes the failure happens to carry and never raises.
"""

from __future__ import annotations

from typing import Any, Mapping

from repo_integrations.domain.entities import ClassifiedError, ErrorInfo, RateLimitSnapshot

_MISSING = object()


def classify(error: BaseException) -> ClassifiedError:
    """Return the error attributes and the rate-limit snapshot salvaged from *error*."""
    response = _read(error, "response")
    info = ErrorInfo(
        code=_code(error, response),
        status=_text(error, "status") or _text(response, "reason_phrase"),
        message=_message(error),
    )
    return ClassifiedError(error_info=info, rate_limit=_rate_limit(error, response))


def _read(obj: Any, name: str, default: Any = None) -> Any:
    """``getattr`` that also survives properties raising arbitrary errors."""
    if obj is None:
        return default
    try:
        return getattr(obj, name, default)
    except Exception:
        return default


def _code(error: BaseException, response: Any) -> int | None:
    for candidate in (_read(error, "code"), _read(response, "status_code")):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
    return None


def _text(obj: Any, name: str) -> str | None:
    value = _read(obj, name)
    return value if isinstance(value, str) and value else None


def _message(error: BaseException) -> str | None:
    # an explicit ``message`` attribute wins, even when it is empty
    if _read(error, "message", _MISSING) is not _MISSING:
        return _text(error, "message")
    try:
        text = str(error)
    except Exception:
        return None
    return text or None


def _rate_limit(error: BaseException, response: Any) -> RateLimitSnapshot:
    headers = _read(error, "headers")
    if not isinstance(headers, Mapping):
        headers = _read(response, "headers")
    if not isinstance(headers, Mapping):
        return RateLimitSnapshot.empty()
    try:
        return RateLimitSnapshot.from_headers(headers)
    except Exception:
        return RateLimitSnapshot.empty()
