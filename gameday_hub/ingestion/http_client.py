"""HTTP helper shared by the provider adapters.

Every call returns a controlled ``Success``/``Failure`` result instead of
raising, so the pipeline can decide per provider whether to abort or degrade.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Union

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "gameday-hub/1.0 (+https://example.local)"
MAX_BODY_SNIPPET = 300
RETRYABLE_STATUS = {429}

TIMEOUT = "timeout"
NETWORK = "network"
SERVER = "server"
REJECTED = "rejected"
BAD_PAYLOAD = "bad_payload"
MISSING_CREDENTIALS = "missing_credentials"


@dataclass(frozen=True)
class Success:
    payload: Any
    attempts: int = 1


@dataclass(frozen=True)
class Failure:
    kind: str
    error: str
    status: int | None = None
    attempts: int = 0


ProviderResult = Union[Success, Failure]


def _truncate(value: str, limit: int = MAX_BODY_SNIPPET) -> str:
    if len(value) <= limit:
        return value
    return value[:limit] + "...<truncated>"


def fetch_json(
    url: str,
    *,
    label: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 12.0,
    retries: int = 2,
    backoff_seconds: float = 0.4,
) -> ProviderResult:
    """GET ``url`` and decode JSON, retrying transient failures.

    Timeouts, connection errors, 5xx, 429 and undecodable bodies are retried
    up to ``retries`` times, sleeping ``backoff_seconds * attempt`` between
    tries. Any other non-2xx status is final on the first answer.
    """

    request_headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        "Accept": "application/json",
    }
    if headers:
        request_headers.update(headers)

    max_attempts = retries + 1
    last_failure: Failure | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            response = requests.get(
                url,
                params=params,
                headers=request_headers,
                timeout=timeout,
            )
        except requests.Timeout as exc:
            last_failure = Failure(TIMEOUT, str(exc), attempts=attempt)
        except requests.RequestException as exc:
            last_failure = Failure(NETWORK, str(exc), attempts=attempt)
        else:
            status = response.status_code
            if status >= 500 or status in RETRYABLE_STATUS:
                body_snippet = _truncate(response.text or "")
                logger.warning(
                    "%s transient status=%s attempt=%s body=%s",
                    label,
                    status,
                    attempt,
                    body_snippet,
                )
                last_failure = Failure(
                    SERVER, f"HTTP {status}: {body_snippet}", status=status, attempts=attempt
                )
            elif status >= 400:
                body_snippet = _truncate(response.text or "")
                logger.error(
                    "%s rejected request status=%s body=%s", label, status, body_snippet
                )
                return Failure(
                    REJECTED, f"HTTP {status}: {body_snippet}", status=status, attempts=attempt
                )
            else:
                try:
                    return Success(response.json(), attempts=attempt)
                except ValueError as exc:
                    last_failure = Failure(
                        BAD_PAYLOAD, f"invalid JSON: {exc}", status=status, attempts=attempt
                    )

        if attempt < max_attempts:
            logger.warning(
                "%s attempt %s/%s failed kind=%s error=%s",
                label,
                attempt,
                max_attempts,
                last_failure.kind,
                last_failure.error,
            )
            time.sleep(backoff_seconds * attempt)

    assert last_failure is not None
    return last_failure
