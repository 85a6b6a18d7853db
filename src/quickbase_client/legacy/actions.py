"""Per-action request/response transforms for the legacy API.

Most actions need no special handling. The few that do get an entry in
``ACTION_HOOKS``; ``resolve_hooks`` is called once when a call is built and
returns no-op hooks for everything else.
"""

from collections.abc import Callable
from typing import Any, NamedTuple

Transform = Callable[[dict[str, Any]], dict[str, Any]]


class ActionHooks(NamedTuple):
    """Pure transforms applied to an action's options and results."""

    request: Transform | None = None
    response: Transform | None = None

    def prepare(self, options: dict[str, Any]) -> dict[str, Any]:
        return self.request(options) if self.request else options

    def finish(self, results: dict[str, Any]) -> dict[str, Any]:
        return self.response(results) if self.response else results


def ensure_list(value: Any) -> list[Any]:
    """Wrap single elements in a list; empty elements become empty lists."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _do_query_request(options: dict[str, Any]) -> dict[str, Any]:
    return {"fmt": "structured", "includeRids": 1, **options}


def _flatten_record(record: Any) -> dict[str, Any]:
    if not isinstance(record, dict):
        return {"value": record}

    flattened = {key: value for key, value in record.items() if key != "f"}
    flattened["fields"] = {
        cell["id"]: cell.get("value", "") for cell in ensure_list(record.get("f")) if isinstance(cell, dict)
    }
    return flattened


def _do_query_response(results: dict[str, Any]) -> dict[str, Any]:
    results = dict(results)

    table = results.get("table")
    if isinstance(table, dict):
        table = dict(table)
        fields = table.get("fields")
        if isinstance(fields, dict) or fields == "":
            table["fields"] = ensure_list(fields.get("field") if fields else None)
        records = table.get("records")
        if isinstance(records, dict) or records == "":
            table["records"] = [_flatten_record(r) for r in ensure_list(records.get("record") if records else None)]
        results["table"] = table

    if "record" in results:
        results["records"] = ensure_list(results.pop("record"))

    return results


def _get_schema_response(results: dict[str, Any]) -> dict[str, Any]:
    results = dict(results)

    table = results.get("table")
    if isinstance(table, dict):
        table = dict(table)
        for plural, singular in (("fields", "field"), ("queries", "query")):
            if plural in table:
                container = table[plural]
                table[plural] = ensure_list(container.get(singular) if isinstance(container, dict) else None)
        results["table"] = table

    return results


def _import_from_csv_response(results: dict[str, Any]) -> dict[str, Any]:
    results = dict(results)

    rids = results.get("rids")
    if rids is not None:
        entries = ensure_list(rids.get("rid") if isinstance(rids, dict) else None)
        results["rids"] = [
            {"rid": entry.get("value"), "update_id": entry.get("update_id")}
            if isinstance(entry, dict)
            else {"rid": entry}
            for entry in entries
        ]

    return results


ACTION_HOOKS: dict[str, ActionHooks] = {
    "API_DoQuery": ActionHooks(request=_do_query_request, response=_do_query_response),
    "API_GetSchema": ActionHooks(response=_get_schema_response),
    "API_ImportFromCSV": ActionHooks(response=_import_from_csv_response),
}

DEFAULT_HOOKS = ActionHooks()


def resolve_hooks(action: str) -> ActionHooks:
    """Look up the hooks for ``action``, falling back to no-op hooks."""
    return ACTION_HOOKS.get(action, DEFAULT_HOOKS)
