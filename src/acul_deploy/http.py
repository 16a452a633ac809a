from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

import httpx
import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from acul_deploy import __version__
from acul_deploy.core.errors import DeployError

_RETRYABLE_STATUSES: set[int] = {408, 429, 500, 502, 503, 504}

log = structlog.get_logger(__name__)


class HttpFetchError(DeployError):
    """Base HTTP error."""


class HttpStatusError(HttpFetchError):
    """
    Status not in the allowed set (after retries, if any were permitted).
    """

    def __init__(
        self,
        *,
        method: str,
        url: str,
        status_code: int,
        body_snippet: str | None,
    ) -> None:
        msg = f"HTTP {status_code} for {method} {url}"
        if body_snippet:
            msg += f" (body: {body_snippet})"
        super().__init__(msg)
        self.method = method
        self.url = url
        self.status_code = status_code


class HttpTransportError(HttpFetchError):
    """Connection-level failure (DNS, refused, reset, timeout)."""

    def __init__(self, *, method: str, url: str, error: BaseException) -> None:
        super().__init__(f"{method} {url} failed: {error}")
        self.method = method
        self.url = url


class HttpRetriesExceeded(HttpFetchError):
    def __init__(
        self, *, method: str, url: str, attempts: int, last_error: BaseException
    ) -> None:
        super().__init__(
            f"HTTP request failed for {method} {url} (attempts={attempts}): {last_error}"
        )
        self.method = method
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


def make_http_client(
    *,
    timeout: httpx.Timeout | None = None,
    follow_redirects: bool = True,
    user_agent: str = f"acul-deploy/{__version__}",
    base_url: str = "",
    headers: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    t = timeout or httpx.Timeout(connect=5.0, read=30.0, write=30.0, pool=5.0)
    h = {"User-Agent": user_agent}
    if headers:
        h.update(headers)
    return httpx.Client(
        base_url=base_url,
        timeout=t,
        follow_redirects=follow_redirects,
        headers=h,
        transport=transport,
    )


def is_retryable_status(code: int) -> bool:
    return code in _RETRYABLE_STATUSES


@dataclass(frozen=True, slots=True)
class RetryableHttpStatus(Exception):
    method: str
    url: str
    status_code: int


def retry_policy(
    *, method: str, url: str, max_attempts: int, base: float, cap: float
) -> Retrying:
    """
    Exponential backoff (base, 2*base, ... capped at cap) over transport
    errors and retryable statuses. Anything else surfaces on the first try.
    """

    def _log_retry(retry_state) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        log.warning(
            "Retrying request",
            method=method,
            url=url,
            attempt=retry_state.attempt_number,
            sleep_s=retry_state.next_action.sleep if retry_state.next_action else None,
            error=repr(exc) if exc else None,
        )

    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=base, max=cap),
        retry=retry_if_exception_type((httpx.TransportError, RetryableHttpStatus)),
        reraise=False,
        before_sleep=_log_retry,
    )


def body_snippet(resp: httpx.Response, *, limit: int = 200) -> str | None:
    s = (resp.text or "")[:limit].strip()
    return s or None


def request_with_retries(
    client: httpx.Client,
    *,
    method: str,
    url: str,
    headers: Mapping[str, str] | None = None,
    allowed_statuses: Iterable[int] = (200,),
    max_attempts: int = 1,
    backoff_base: float = 0.5,
    backoff_cap: float = 4.0,
) -> httpx.Response:
    """
    Issue a request, retrying transport errors and 408/429/5xx.

    With the default max_attempts=1 any failure is terminal.
    """
    allowed = set(allowed_statuses)
    retrying = retry_policy(
        method=method,
        url=url,
        max_attempts=max_attempts,
        base=backoff_base,
        cap=backoff_cap,
    )

    def _do() -> httpx.Response:
        resp = client.request(method, url, headers=headers)
        if resp.status_code in allowed:
            return resp

        if is_retryable_status(resp.status_code) and max_attempts > 1:
            raise RetryableHttpStatus(
                method=method, url=url, status_code=resp.status_code
            )

        raise HttpStatusError(
            method=method,
            url=url,
            status_code=resp.status_code,
            body_snippet=body_snippet(resp),
        )

    try:
        for attempt in retrying:
            with attempt:
                return _do()

    except RetryError as re:
        last = re.last_attempt.exception()
        raise HttpRetriesExceeded(
            method=method,
            url=url,
            attempts=re.last_attempt.attempt_number,
            last_error=last or Exception("unknown"),
        ) from last

    raise RuntimeError("unreachable")
