"""quickbase-client - Async client for the Quickbase REST and legacy XML APIs.

- Concurrency / per-period throttling of outbound calls
- Automatic retry with Retry-After backoff on 429 responses
- Transparent temporary token renewal and legacy ticket re-authentication
- Structured ``QuickBaseError`` with code, message, description and ray id

Example:
    ```python
    from quickbase_client import QuickBase, QuickBaseOptions

    options = QuickBaseOptions.from_env(realm="demo.quickbase.com")

    async with QuickBase(options) as qb:
        fields = await qb.get_fields(table_id="bxxxxxxxx")
    ```
"""

__version__ = "0.1.0"

from quickbase_client.client import BaseQuickBaseClient, QuickBase  # noqa: E402
from quickbase_client.config import QuickBaseOptions  # noqa: E402
from quickbase_client.errors import NoConnectionsAvailableError, QuickBaseError  # noqa: E402
from quickbase_client.legacy import QuickBaseLegacy  # noqa: E402
from quickbase_client.transport import RequestDescriptor, Throttle  # noqa: E402

__all__ = [
    "BaseQuickBaseClient",
    "NoConnectionsAvailableError",
    "QuickBase",
    "QuickBaseError",
    "QuickBaseLegacy",
    "QuickBaseOptions",
    "RequestDescriptor",
    "Throttle",
    "__version__",
]
