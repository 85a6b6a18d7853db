"""Tests for legacy action transforms."""

import pytest

from quickbase_client.legacy.actions import DEFAULT_HOOKS, ensure_list, resolve_hooks


@pytest.mark.unit
def test_unknown_action_uses_no_op_hooks():
    hooks = resolve_hooks("API_GetDBInfo")

    assert hooks is DEFAULT_HOOKS
    assert hooks.prepare({"a": 1}) == {"a": 1}
    assert hooks.finish({"b": 2}) == {"b": 2}


@pytest.mark.unit
@pytest.mark.parametrize(("value", "expected"), [(None, []), ("", []), ([1], [1]), ({"a": 1}, [{"a": 1}])])
def test_ensure_list(value, expected):
    assert ensure_list(value) == expected


@pytest.mark.unit
def test_do_query_request_defaults():
    hooks = resolve_hooks("API_DoQuery")

    assert hooks.prepare({"query": "{3.GT.0}"}) == {"fmt": "structured", "includeRids": 1, "query": "{3.GT.0}"}
    assert hooks.prepare({"fmt": "raw"})["fmt"] == "raw"


@pytest.mark.unit
def test_do_query_response_single_record():
    results = {
        "errcode": 0,
        "table": {
            "fields": {"field": {"id": 6, "label": "Name"}},
            "records": {"record": {"rid": 1, "f": {"id": 6, "value": "Hello"}}},
        },
    }

    finished = resolve_hooks("API_DoQuery").finish(results)

    assert finished["table"]["fields"] == [{"id": 6, "label": "Name"}]
    assert finished["table"]["records"] == [{"rid": 1, "fields": {6: "Hello"}}]
    # Input is left untouched
    assert isinstance(results["table"]["fields"], dict)


@pytest.mark.unit
def test_do_query_response_many_records():
    results = {
        "table": {
            "fields": "",
            "records": {
                "record": [
                    {"rid": 1, "f": [{"id": 3, "value": 1}, {"id": 6}]},
                    {"rid": 2, "f": [{"id": 3, "value": 2}, {"id": 6, "value": "x"}]},
                ]
            },
        }
    }

    table = resolve_hooks("API_DoQuery").finish(results)["table"]

    assert table["fields"] == []
    assert table["records"] == [
        {"rid": 1, "fields": {3: 1, 6: ""}},
        {"rid": 2, "fields": {3: 2, 6: "x"}},
    ]


@pytest.mark.unit
def test_do_query_response_empty_records():
    table = resolve_hooks("API_DoQuery").finish({"table": {"records": ""}})["table"]

    assert table["records"] == []


@pytest.mark.unit
def test_do_query_unstructured_records():
    finished = resolve_hooks("API_DoQuery").finish({"record": {"record_id_": 1}})

    assert finished == {"records": [{"record_id_": 1}]}


@pytest.mark.unit
def test_get_schema_response():
    results = {"table": {"fields": {"field": {"id": 3}}, "queries": {"query": [{"id": 1}, {"id": 2}]}}}

    table = resolve_hooks("API_GetSchema").finish(results)["table"]

    assert table["fields"] == [{"id": 3}]
    assert table["queries"] == [{"id": 1}, {"id": 2}]


@pytest.mark.unit
def test_import_from_csv_response():
    results = {"num_recs_added": 2, "rids": {"rid": [{"update_id": 111, "value": 5}, 6]}}

    finished = resolve_hooks("API_ImportFromCSV").finish(results)

    assert finished["rids"] == [{"rid": 5, "update_id": 111}, {"rid": 6}]
