"""XML request bodies and responses for the legacy Quickbase API.

Requests are a single ``<qdbapi>`` element with one child per option:

```xml
<qdbapi>
    <ticket>xxxx</ticket>
    <query>{'3'.GT.'0'}</query>
    <clist>3.6.7</clist>
    <field fid="6">Hello</field>
</qdbapi>
```

Responses use the same root and always carry ``errcode``/``errtext``; a
non-zero ``errcode`` is raised as ``QuickBaseError``.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any

import httpx

from quickbase_client.errors.exceptions import QuickBaseError
from quickbase_client.errors.handler import RAY_ID_HEADER, lower_keys, raise_for_status

logger = logging.getLogger(__name__)

ROOT_TAG = "qdbapi"
ERROR_PROCESSING_REQUEST = 1000

# Options whose list values are joined into a single delimited string
JOINED_OPTIONS: dict[str, str] = {
    "clist": ".",
    "clist_output": ".",
    "slist": ".",
    "options": ".",
    "records_csv": "\n",
}


def prepare_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize caller options into the shape the XML builder expects.

    - ``fields`` is renamed to ``field``
    - list values of clist/slist/options/records_csv are joined
    - ``field`` entries ``{"fid": 6, "value": "x"}`` address the field by id
      when ``fid`` is numeric and by name otherwise
    - ``None`` values are dropped
    """
    prepared: dict[str, Any] = {}

    for key, value in options.items():
        if value is None:
            continue

        if key == "fields":
            key = "field"

        if key in JOINED_OPTIONS and isinstance(value, (list, tuple)):
            value = JOINED_OPTIONS[key].join(str(item) for item in value)
        elif key == "field":
            value = [_prepare_field(item) for item in value]

        prepared[key] = value

    return prepared


def _prepare_field(item: Mapping[str, Any]) -> dict[str, Any]:
    fid = item.get("fid", item.get("name"))
    attribute = "fid" if str(fid).isdigit() else "name"
    return {"$": {attribute: str(fid)}, "_": item.get("value")}


def build_payload(options: Mapping[str, Any], encoding: str = "UTF-8") -> str:
    """Render prepared options as a ``<qdbapi>`` XML document."""
    root = ET.Element(ROOT_TAG)

    for key, value in options.items():
        for item in value if isinstance(value, list) else [value]:
            _append(root, key, item)

    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="{encoding}"?>{body}'


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    element = ET.SubElement(parent, tag)

    if isinstance(value, Mapping) and ("$" in value or "_" in value):
        for name, attr in (value.get("$") or {}).items():
            element.set(name, str(attr))
        value = value.get("_")

    if isinstance(value, bool):
        element.text = "1" if value else "0"
    elif value is not None:
        element.text = str(value)


def coerce(text: str | None) -> Any:
    """Turn numeric text into int/float, leave everything else alone."""
    if text is None:
        return ""

    stripped = text.strip()
    if not stripped:
        return ""

    try:
        return int(stripped)
    except ValueError:
        pass

    try:
        number = float(stripped)
    except ValueError:
        return stripped

    # Keep values such as "nan" or "1e5" that only look numeric to float()
    return number if stripped.replace(".", "", 1).lstrip("-").isdigit() else stripped


def element_to_value(element: ET.Element) -> Any:
    """Convert an element into plain Python values.

    Leaf elements without attributes become scalars. Otherwise attributes and
    children are merged into one dict; repeated child tags become lists and
    text alongside attributes is stored under ``value``.
    """
    children = list(element)

    if not children and not element.attrib:
        return coerce(element.text)

    result: dict[str, Any] = {name: coerce(value) for name, value in element.attrib.items()}

    for child in children:
        value = element_to_value(child)
        if child.tag in result:
            if not isinstance(result[child.tag], list):
                result[child.tag] = [result[child.tag]]
            result[child.tag].append(value)
        else:
            result[child.tag] = value

    text = (element.text or "").strip()
    if text:
        result["value"] = coerce(text)

    return result


def parse_response(response: httpx.Response) -> Any:
    """Decode a legacy API response.

    Returns:
        Dict of the ``<qdbapi>`` children for XML responses, raw text for
        anything else (e.g. API_GenResultsTable HTML/CSV output).

    Raises:
        QuickBaseError: On HTTP failure, unparseable XML (code 1000), or a
            non-zero ``errcode``.
    """
    raise_for_status(response)

    content_type = response.headers.get("content-type", "")
    if "xml" not in content_type:
        return response.text

    ray_id = lower_keys(response.headers).get(RAY_ID_HEADER)

    try:
        root = ET.fromstring(response.content)
    except ET.ParseError as e:
        logger.warning(f"Unparseable legacy API response ({len(response.content)} bytes): {e}")
        raise QuickBaseError(
            ERROR_PROCESSING_REQUEST, "Error Processing Request", str(e), ray_id=ray_id, response=response
        ) from e

    results = element_to_value(root)
    if not isinstance(results, dict):
        results = {}

    errcode = results.get("errcode", 0)
    if errcode != 0:
        raise QuickBaseError(
            errcode if isinstance(errcode, int) else ERROR_PROCESSING_REQUEST,
            str(results.get("errtext", "")),
            str(results.get("errdetail", "")),
            ray_id=ray_id,
            response=response,
        )

    return results
