"""Quickbase clients.

``BaseQuickBaseClient`` owns what every client shares: options, the throttle,
the ``httpx.AsyncClient`` and the request core. ``QuickBase`` adds the REST
API endpoint methods; the legacy XML client lives in ``quickbase_client.legacy``.

Example:
    ```python
    from quickbase_client import QuickBase, QuickBaseOptions

    options = QuickBaseOptions(realm="demo.quickbase.com", user_token="b123_xxx")

    async with QuickBase(options) as qb:
        results = await qb.run_query(table_id="bxxxxxxxx", where="{3.GT.0}", select=[3, 6])
    ```
"""

import logging
import platform
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from quickbase_client import __version__
from quickbase_client.auth.tokens import APP_TOKEN_HEADER, authorization_headers
from quickbase_client.config import QuickBaseOptions
from quickbase_client.errors.handler import raise_for_status
from quickbase_client.transport.request import RequestDescriptor
from quickbase_client.transport.retry import RetryAuthCore
from quickbase_client.transport.throttle import Throttle

logger = logging.getLogger(__name__)

TEMP_TOKEN_PATH = "auth/temporary/"

RequestOptions = Mapping[str, Any]


def decode_response(response: httpx.Response) -> Any:
    """Return the decoded body of a successful REST response.

    Raises:
        QuickBaseError: If the response status is not 2xx
    """
    raise_for_status(response)

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text


def _compact(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class BaseQuickBaseClient(ABC):
    """Shared plumbing for the REST and legacy clients.

    Args:
        options: Client options (or a dict accepted by
            ``QuickBaseOptions.from_dict``); defaults apply when omitted
        throttle: Throttle to share between clients; one is built from the
            connection limit options when omitted
        transport: httpx transport override, mainly for tests
    """

    CLASS_NAME = "QuickBase"

    def __init__(
        self,
        options: QuickBaseOptions | Mapping[str, Any] | None = None,
        *,
        throttle: Throttle | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if options is None:
            options = QuickBaseOptions()
        elif not isinstance(options, QuickBaseOptions):
            options = QuickBaseOptions.from_dict(dict(options))

        self.options = options
        self.throttle = throttle or Throttle(
            options.connection_limit,
            options.connection_limit_period,
            error_on_limit=options.error_on_connection_limit,
        )

        client_kwargs: dict[str, Any] = {}
        if transport is not None:
            client_kwargs["transport"] = transport
        elif options.proxy:
            client_kwargs["proxy"] = options.proxy

        self.http = httpx.AsyncClient(
            base_url=self._base_url(),
            headers={"User-Agent": self.user_agent},
            timeout=options.timeout,
            **client_kwargs,
        )
        self.core = RetryAuthCore(
            http=self.http,
            throttle=self.throttle,
            options=self.options,
            authorize=self._authorize,
            decode=self._decode,
            **self._renewers(),
        )

        logger.debug(f"New {type(self).__name__} instance for realm {options.realm!r}")

    @property
    def user_agent(self) -> str:
        return f"{self.options.user_agent} quickbase-client/v{__version__} python/{platform.python_version()}".strip()

    def _base_url(self) -> str:
        return self.options.base_url

    @abstractmethod
    def _authorize(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """Return ``descriptor`` with the current credentials applied."""

    def _decode(self, response: httpx.Response) -> Any:
        return decode_response(response)

    def _renewers(self) -> dict[str, Any]:
        return {}

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def set_temp_token(self, dbid: str, temp_token: str):
        """Store a temporary token for use on calls addressed to ``dbid``."""
        self.options.set_temp_token(dbid, temp_token)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Export the client configuration, credentials included."""
        return self.options.to_dict()

    def to_json(self) -> str:
        return self.options.to_json()

    @classmethod
    def from_dict(cls, data: str | dict[str, Any], **kwargs: Any):
        """Build a new client from ``to_dict``/``to_json`` output."""
        return cls(QuickBaseOptions.from_dict(data), **kwargs)

    from_json = from_dict

    @classmethod
    def is_quickbase(cls, obj: Any) -> bool:
        """Test whether ``obj`` is a Quickbase client."""
        return getattr(obj, "CLASS_NAME", None) == cls.CLASS_NAME


class QuickBase(BaseQuickBaseClient):
    """Client for the Quickbase JSON REST API.

    Every endpoint method takes keyword arguments and an optional
    ``request_options`` mapping (``method``, ``url``, ``headers``, ``params``,
    ``json``) merged into the request before it is sent.
    """

    def _authorize(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        credentials = authorization_headers(
            self.options,
            resource_id=descriptor.resource_id,
            include_temp_token=not descriptor.url.startswith(TEMP_TOKEN_PATH),
        )

        defaults = {
            "Content-Type": "application/json; charset=UTF-8",
            "QB-Realm-Hostname": self.options.realm_hostname,
        }
        if APP_TOKEN_HEADER in credentials:
            defaults[APP_TOKEN_HEADER] = credentials.pop(APP_TOKEN_HEADER)

        # Caller headers win over the defaults. Authorization always carries
        # the current credential when the client has one.
        return descriptor.with_default_headers(defaults).with_headers(credentials)

    def _renewers(self) -> dict[str, Any]:
        return {"renew_temporary_token": self._fetch_temp_token}

    async def _fetch_temp_token(self, dbid: str, attempt: int) -> str:
        descriptor = RequestDescriptor(url=f"{TEMP_TOKEN_PATH}{dbid}", resource_id=dbid)
        results = await self.core.execute(descriptor, attempt)
        return results["temporaryAuthorization"]

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        resource_id: str | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        """Call any REST endpoint, including ones without a helper method."""
        descriptor = RequestDescriptor(
            method=method.upper(),
            url=url.lstrip("/"),
            params=_compact(params or {}),
            json=json,
            resource_id=resource_id,
        ).merge(request_options)

        return await self.core.execute(descriptor)

    async def get_temp_token_dbid(self, *, dbid: str, request_options: RequestOptions | None = None) -> Any:
        """Get a temporary token for table or app ``dbid`` and start using it."""
        results = await self.request("GET", f"{TEMP_TOKEN_PATH}{dbid}", resource_id=dbid, request_options=request_options)
        self.set_temp_token(dbid, results["temporaryAuthorization"])
        return results

    async def get_app(self, *, app_id: str, request_options: RequestOptions | None = None) -> Any:
        return await self.request("GET", f"apps/{app_id}", resource_id=app_id, request_options=request_options)

    async def get_app_tables(self, *, app_id: str, request_options: RequestOptions | None = None) -> Any:
        return await self.request(
            "GET", "tables", params={"appId": app_id}, resource_id=app_id, request_options=request_options
        )

    async def get_table(self, *, app_id: str, table_id: str, request_options: RequestOptions | None = None) -> Any:
        return await self.request(
            "GET", f"tables/{table_id}", params={"appId": app_id}, resource_id=table_id, request_options=request_options
        )

    async def get_fields(
        self,
        *,
        table_id: str,
        include_field_perms: bool | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        return await self.request(
            "GET",
            "fields",
            params={"tableId": table_id, "includeFieldPerms": include_field_perms},
            resource_id=table_id,
            request_options=request_options,
        )

    async def get_field(self, *, table_id: str, field_id: int, request_options: RequestOptions | None = None) -> Any:
        return await self.request(
            "GET", f"fields/{field_id}", params={"tableId": table_id}, resource_id=table_id, request_options=request_options
        )

    async def get_table_reports(self, *, table_id: str, request_options: RequestOptions | None = None) -> Any:
        return await self.request(
            "GET", "reports", params={"tableId": table_id}, resource_id=table_id, request_options=request_options
        )

    async def run_report(
        self,
        *,
        report_id: str | int,
        table_id: str,
        skip: int | None = None,
        top: int | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        return await self.request(
            "POST",
            f"reports/{report_id}/run",
            params={"tableId": table_id, "skip": skip, "top": top},
            resource_id=table_id,
            request_options=request_options,
        )

    async def run_query(
        self,
        *,
        table_id: str,
        where: str | None = None,
        select: Sequence[int] | None = None,
        sort_by: Sequence[Mapping[str, Any]] | None = None,
        group_by: Sequence[Mapping[str, Any]] | None = None,
        options: Mapping[str, Any] | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        body = _compact(
            {
                "from": table_id,
                "where": where,
                "select": list(select) if select is not None else None,
                "sortBy": list(sort_by) if sort_by is not None else None,
                "groupBy": list(group_by) if group_by is not None else None,
                "options": dict(options) if options is not None else None,
            }
        )
        return await self.request(
            "POST", "records/query", json=body, resource_id=table_id, request_options=request_options
        )

    async def upsert_records(
        self,
        *,
        table_id: str,
        data: Sequence[Mapping[str, Any]],
        merge_field_id: int | None = None,
        fields_to_return: Sequence[int] | None = None,
        request_options: RequestOptions | None = None,
    ) -> Any:
        body = _compact(
            {
                "to": table_id,
                "data": list(data),
                "mergeFieldId": merge_field_id,
                "fieldsToReturn": list(fields_to_return) if fields_to_return is not None else None,
            }
        )
        return await self.request("POST", "records", json=body, resource_id=table_id, request_options=request_options)

    async def delete_records(
        self, *, table_id: str, where: str, request_options: RequestOptions | None = None
    ) -> Any:
        return await self.request(
            "DELETE",
            "records",
            json={"from": table_id, "where": where},
            resource_id=table_id,
            request_options=request_options,
        )

