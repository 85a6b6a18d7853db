"""Transport layer: request descriptors, throttling and the retrying request core.

Modules:
    request: Immutable request descriptors and per-call overrides
    throttle: Concurrency / per-window admission control
    retry: Rate-limit retry and credential renewal around each call

Example:
    ```python
    from quickbase_client.transport import RequestDescriptor, Throttle

    shared = Throttle(max_concurrent=5, window_ms=1000)
    descriptor = RequestDescriptor(method="GET", url="apps/bxxxxxxxx")
    ```
"""

from quickbase_client.transport.request import RequestDescriptor, deep_merge, merge_headers
from quickbase_client.transport.retry import (
    MAX_ATTEMPTS,
    RetryAuthCore,
    is_expired_credential,
    retry_delay_ms,
)
from quickbase_client.transport.throttle import Throttle

__all__ = [
    "MAX_ATTEMPTS",
    "RequestDescriptor",
    "RetryAuthCore",
    "Throttle",
    "deep_merge",
    "is_expired_credential",
    "merge_headers",
    "retry_delay_ms",
]
