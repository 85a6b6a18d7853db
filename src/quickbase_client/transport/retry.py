"""Request core: throttling, rate-limit retry and credential renewal.

Every API call, REST or legacy XML, goes through ``RetryAuthCore.execute``.
The core only looks at the status code, headers and decoded error of a failed
attempt, never at the body encoding.

## Failure handling

| Failure | Action | Counts against attempts |
|---------|--------|-------------------------|
| 429 with `retry_on_quota_exceeded` | Sleep for Retry-After, resend | No (unbounded) |
| Attempts exhausted (>= 3) | Raise | |
| Expired/invalid temporary token | Fetch a new one, resend | Yes |
| Legacy errcode 4 with stored username/password and no user token | Re-authenticate, resend | Yes |
| No response at all (`httpx.TransportError`) | Raise unwrapped | |
| Anything else | Raise `QuickBaseError` | |

The throttle slot is held around the transport call only, so a request
sleeping off a 429 does not occupy a connection slot.

## Example

```python
core = RetryAuthCore(
    http=httpx.AsyncClient(base_url=options.base_url),
    throttle=Throttle(10, 1000),
    options=options,
    authorize=add_credentials,
    decode=decode_json,
    renew_temporary_token=fetch_temp_token,
)

body = await core.execute(RequestDescriptor(url="apps/bxxxxxxx"))
```
"""

import asyncio
import itertools
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from quickbase_client.config import QuickBaseOptions
from quickbase_client.errors.exceptions import QuickBaseError
from quickbase_client.errors.handler import lower_keys
from quickbase_client.transport.request import RequestDescriptor
from quickbase_client.transport.throttle import Throttle

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 10_000.0
RATE_LIMITED = 429
LEGACY_INVALID_TICKET = 4

EXPIRED_CREDENTIAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ticket has expired", re.IGNORECASE),
    re.compile(r"Invalid Authorization", re.IGNORECASE),
    re.compile(r"Required header 'authorization' not found", re.IGNORECASE),
)

Authorize = Callable[[RequestDescriptor], RequestDescriptor]
Decode = Callable[[httpx.Response], Any]
RenewTemporaryToken = Callable[[str, int], Awaitable[str]]
Reauthenticate = Callable[[int], Awaitable[str]]


def retry_delay_ms(headers: Mapping[str, Any] | None) -> float:
    """Work out how long to wait before retrying a rate-limited request.

    Supports:
    - ``Retry-After`` as delay-seconds: "1.5" -> 1500
    - ``Retry-After`` as HTTP-date: offset from now, never negative
    - ``x-ratelimit-reset`` in milliseconds when Retry-After is absent
    - 10000 ms when neither header is usable

    Args:
        headers: Response headers, any key casing

    Returns:
        Delay in milliseconds
    """
    headers = lower_keys(headers)

    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return float(max(0, round(float(retry_after) * 1000)))
        except (ValueError, OverflowError):
            pass

        try:
            retry_date = parsedate_to_datetime(str(retry_after))
            if retry_date.tzinfo is None:
                retry_date = retry_date.replace(tzinfo=UTC)
            return max(0.0, (retry_date - datetime.now(UTC)).total_seconds() * 1000)
        except (ValueError, TypeError):
            logger.debug(f"Unparseable Retry-After header: {retry_after!r}")

    reset = headers.get("x-ratelimit-reset")
    if reset:
        try:
            return max(0.0, float(reset))
        except ValueError:
            logger.debug(f"Unparseable x-ratelimit-reset header: {reset!r}")

    return DEFAULT_RETRY_DELAY_MS


def is_expired_credential(description: str | None) -> bool:
    """Whether an error description means the temporary token needs renewing."""
    text = description or ""
    return any(pattern.search(text) for pattern in EXPIRED_CREDENTIAL_PATTERNS)


class RetryAuthCore:
    """Send request descriptors with throttling, retry and credential renewal.

    Args:
        http: Client used for the actual HTTP exchange
        throttle: Admission control shared by every call of the client
        options: Client options; credential fields are read on every attempt
            and updated in place after a renewal
        authorize: Returns the descriptor with the current credentials applied
        decode: Returns the decoded body of a response or raises QuickBaseError
        renew_temporary_token: ``(dbid, attempt) -> token``; enables temporary
            token renewal
        reauthenticate: ``attempt -> ticket``; enables legacy re-authentication
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        throttle: Throttle,
        options: QuickBaseOptions,
        authorize: Authorize,
        decode: Decode,
        renew_temporary_token: RenewTemporaryToken | None = None,
        reauthenticate: Reauthenticate | None = None,
    ) -> None:
        self.http = http
        self.throttle = throttle
        self.options = options
        self._authorize = authorize
        self._decode = decode
        self._renew_temporary_token = renew_temporary_token
        self._reauthenticate = reauthenticate
        self._ids = itertools.count(1)

    async def execute(self, descriptor: RequestDescriptor, attempt: int = 0) -> Any:
        """Send ``descriptor`` and return the decoded response body.

        Args:
            descriptor: The request to send
            attempt: Renewal attempts already spent on this logical call

        Returns:
            Decoded response body

        Raises:
            QuickBaseError: The API reported a failure that could not be
                recovered from
            httpx.TransportError: No response was received
        """
        while True:
            request_id = next(self._ids)

            try:
                return await self._send(request_id, descriptor)
            except QuickBaseError as error:
                logger.debug(f"[{request_id}] Quickbase error: {error!r}")

                if error.code == RATE_LIMITED and self.options.retry_on_quota_exceeded:
                    delay = retry_delay_ms(error.response.headers if error.response is not None else None)
                    logger.warning(
                        f"[{request_id}] {descriptor.method} {descriptor.url} rate limited, "
                        f"retrying in {delay:.0f}ms"
                    )
                    await asyncio.sleep(delay / 1000)
                    continue

                if attempt >= MAX_ATTEMPTS:
                    raise

                if self._should_renew_temporary_token(error):
                    await self._renew_and_install(request_id, descriptor, attempt + 1)
                    return await self.execute(descriptor, attempt + 1)

                if self._should_reauthenticate(error):
                    logger.info(f"[{request_id}] Ticket rejected, re-authenticating {self.options.username}")
                    self.options.ticket = await self._reauthenticate(attempt + 1)
                    return await self.execute(descriptor, attempt + 1)

                raise

    async def _send(self, request_id: int, descriptor: RequestDescriptor) -> Any:
        prepared = self._authorize(descriptor)

        logger.debug(f"[{request_id}] {prepared.method} {prepared.url} params={dict(prepared.params)}")

        async with self.throttle.slot():
            response = await self.http.request(
                prepared.method,
                prepared.url,
                headers=dict(prepared.headers),
                params=dict(prepared.params) or None,
                json=prepared.json,
                content=prepared.content,
            )

        logger.debug(f"[{request_id}] {response.status_code} {response.reason_phrase}")

        return self._decode(response)

    def _should_renew_temporary_token(self, error: QuickBaseError) -> bool:
        return (
            self._renew_temporary_token is not None
            and self.options.auto_renew_temp_tokens
            and bool(self.options.temp_token_dbid)
            and is_expired_credential(error.description)
        )

    def _should_reauthenticate(self, error: QuickBaseError) -> bool:
        return (
            self._reauthenticate is not None
            and error.code == LEGACY_INVALID_TICKET
            # The ticket is not sent while a user token is set
            and not self.options.user_token
            and bool(self.options.username)
            and bool(self.options.password)
        )

    async def _renew_and_install(self, request_id: int, descriptor: RequestDescriptor, attempt: int) -> None:
        # Renew for the resource this call addresses so a token issued for
        # one table is never reused on another.
        dbid = descriptor.resource_id or self.options.temp_token_dbid

        logger.info(f"[{request_id}] Getting new temporary token for {dbid}")

        token = await self._renew_temporary_token(dbid, attempt)
        self.options.set_temp_token(dbid, token)
