"""Request descriptors handed from endpoint methods to the request core."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

# Per-call overrides accepted by every endpoint method's ``request_options``
OVERRIDABLE_FIELDS: frozenset[str] = frozenset(["method", "url", "headers", "params", "json", "data", "content"])


def merge_headers(base: Mapping[str, str], override: Mapping[str, str]) -> dict[str, str]:
    """Lay ``override`` over ``base``, matching header names case-insensitively.

    A name set in ``override`` replaces every spelling of it in ``base``, so
    one header is never sent twice.
    """
    merged = dict(base)
    for name, value in override.items():
        for existing in [key for key in merged if key.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def deep_merge(base: Any, override: Any) -> Any:
    """Merge ``override`` into ``base`` without mutating either.

    Mappings are merged key by key, recursively; anything else in
    ``override`` replaces the value in ``base``.
    """
    if isinstance(base, Mapping) and isinstance(override, Mapping):
        merged = dict(base)
        for key, value in override.items():
            merged[key] = deep_merge(merged[key], value) if key in merged else value
        return merged
    return override


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to send one API call.

    Attributes:
        method: HTTP method
        url: URL relative to the client's base URL
        headers: Extra request headers (authorization is added at send time)
        params: Query string parameters
        json: JSON body (REST API)
        data: Action fields rendered into the XML body at send time (legacy API)
        content: Raw body, set once the legacy XML body has been rendered
        resource_id: Table or application id the call addresses; temporary
            tokens are only sent when they were issued for this id
    """

    method: str = "GET"
    url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    json: Any = None
    data: Mapping[str, Any] | None = None
    content: str | bytes | None = None
    resource_id: str | None = None

    def merge(self, overrides: Mapping[str, Any] | None) -> "RequestDescriptor":
        """Apply a per-call ``request_options`` block.

        Raises:
            ValueError: If ``overrides`` names a field that cannot be overridden.
        """
        if not overrides:
            return self

        unknown = set(overrides) - OVERRIDABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported request option(s): {', '.join(sorted(unknown))}")

        changes = {
            name: merge_headers(self.headers, value) if name == "headers" else deep_merge(getattr(self, name), value)
            for name, value in overrides.items()
        }
        if "method" in changes:
            changes["method"] = str(changes["method"]).upper()

        return replace(self, **changes)

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with ``headers`` laid over the existing ones."""
        return replace(self, headers=merge_headers(self.headers, headers))

    def with_default_headers(self, defaults: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with ``defaults`` added where no header of that name is set."""
        return replace(self, headers=merge_headers(defaults, self.headers))
