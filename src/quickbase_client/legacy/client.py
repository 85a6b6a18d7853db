"""Client for the legacy Quickbase XML API."""

import logging
from dataclasses import replace
from typing import Any

import httpx

from quickbase_client.client import BaseQuickBaseClient, RequestOptions
from quickbase_client.legacy.actions import resolve_hooks
from quickbase_client.legacy.xml import build_payload, parse_response, prepare_options
from quickbase_client.transport.request import RequestDescriptor

logger = logging.getLogger(__name__)

AUTHENTICATE = "API_Authenticate"


class QuickBaseLegacy(BaseQuickBaseClient):
    """Call legacy ``API_*`` actions over HTTP POST with XML bodies.

    Credentials (``usertoken`` or ``ticket``, plus ``apptoken``) are added to
    the XML body when the request is sent, so a call retried after
    re-authentication carries the fresh ticket. When a call fails with
    errcode 4 (invalid ticket) and a username and password are stored, the
    client signs in again transparently.

    Example:
        ```python
        async with QuickBaseLegacy({"realm": "demo", "app_token": "xxx"}) as qb:
            await qb.authenticate("user@example.com", "secret")
            results = await qb.api("API_DoQuery", dbid="bxxxxxxxx", query="{'3'.GT.'0'}", clist=[3, 6])
        ```
    """

    CLASS_NAME = "QuickBaseLegacy"

    def _base_url(self) -> str:
        return self.options.legacy_base_url

    def _decode(self, response: httpx.Response) -> Any:
        return parse_response(response)

    def _renewers(self) -> dict[str, Any]:
        return {"reauthenticate": self._reauthenticate}

    def _authorize(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        prepared = descriptor.with_default_headers({"Content-Type": "application/xml"})

        # A caller-supplied body is sent as is
        if descriptor.data is None or descriptor.content is not None:
            return prepared

        fields = dict(descriptor.data)
        action = descriptor.params.get("a")

        if action != AUTHENTICATE:
            if self.options.user_token:
                fields.setdefault("usertoken", self.options.user_token)
            elif self.options.ticket:
                fields.setdefault("ticket", self.options.ticket)

        if self.options.app_token:
            fields.setdefault("apptoken", self.options.app_token)

        fields.setdefault("msInUTC", 1)

        return replace(prepared, content=build_payload(fields, fields.get("encoding", "UTF-8")), data=None)

    def _build(
        self,
        action: str,
        options: dict[str, Any],
        dbid: str | None,
        request_options: RequestOptions | None,
    ) -> RequestDescriptor:
        return RequestDescriptor(
            method="POST",
            url=f"db/{dbid or 'main'}",
            params={"a": action},
            headers={"QUICKBASE-ACTION": action},
            data=prepare_options(options),
            resource_id=dbid,
        ).merge(request_options)

    async def api(
        self,
        action: str,
        *,
        dbid: str | None = None,
        request_options: RequestOptions | None = None,
        **options: Any,
    ) -> Any:
        """Call a legacy API action.

        Args:
            action: Action name, e.g. ``API_DoQuery``
            dbid: Table or application id; ``main`` is used when omitted
            request_options: Per-call request overrides
            **options: Action parameters, e.g. ``query``, ``clist``, ``fields``

        Returns:
            The ``<qdbapi>`` response as a dict (after the action's response
            transform), or raw text for non-XML responses.
        """
        hooks = resolve_hooks(action)
        descriptor = self._build(action, hooks.prepare(dict(options)), dbid, request_options)

        results = await self.core.execute(descriptor)

        return hooks.finish(results) if isinstance(results, dict) else results

    async def authenticate(self, username: str, password: str, hours: int | None = None) -> dict[str, Any]:
        """Sign in and keep the ticket, username and password for later calls."""
        results = await self._authenticate(username, password, hours, attempt=0)

        self.options.username = username
        self.options.password = password
        self.options.ticket = str(results["ticket"])

        logger.info(f"Authenticated legacy session for {username}")
        return results

    async def _authenticate(self, username: str, password: str, hours: int | None, attempt: int) -> dict[str, Any]:
        descriptor = self._build(
            AUTHENTICATE,
            {"username": username, "password": password, "hours": hours},
            None,
            None,
        )
        return await self.core.execute(descriptor, attempt)

    async def _reauthenticate(self, attempt: int) -> str:
        results = await self._authenticate(self.options.username, self.options.password, None, attempt)
        return str(results["ticket"])
