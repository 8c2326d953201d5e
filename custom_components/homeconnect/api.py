"""Async client for the Home Connect cloud API."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
import logging
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from .codecs import (
    AppliancesResponse,
    ProgramResponse,
    SettingsResponse,
    StatusResponse,
    encode_item_write,
    encode_program_key,
)
from .const import (
    ACCEPT_LANGUAGE,
    ACTIVE_PROGRAM_PATH_FMT,
    API_BASE,
    APPLIANCES_PATH,
    CONTENT_TYPE,
    EVENTS_PATH,
    PROGRAM_OPTION_PATH_FMT,
    REQUEST_TIMEOUT,
    SELECTED_PROGRAM_PATH_FMT,
    SETTING_PATH_FMT,
    SETTING_POWER_STATE,
    SETTINGS_PATH_FMT,
    STATUS_PATH_FMT,
    STREAM_IDLE_TIMEOUT,
)
from .domain.events import Event
from .domain.ids import HomeAppliance
from .domain.program import NO_PROGRAM, ProgramSlot
from .sanitize import mask_identifier, redact_text

_LOGGER = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

# Returned when no program is selected or active.
_NO_PROGRAM_STATUSES = (404,)


class CommunicationError(Exception):
    """Talking to the Home Connect cloud failed."""


class AuthorizationError(CommunicationError):
    """The access token was rejected."""


class RateLimitError(CommunicationError):
    """Server rate-limited the client (HTTP 429)."""


class ApplianceClientProto(Protocol):
    """Calls the synchronisation engine makes against one appliance."""

    async def get_status(self, ha_id: str) -> list[Event]:
        """Return the status items of ``ha_id``."""

    async def get_settings(self, ha_id: str) -> list[Event]:
        """Return the settings of ``ha_id``."""

    async def get_selected_program(self, ha_id: str) -> ProgramSlot:
        """Return the selected program of ``ha_id``."""

    async def get_active_program(self, ha_id: str) -> ProgramSlot:
        """Return the running program of ``ha_id``."""

    async def start_program(self, ha_id: str, program_key: str) -> None:
        """Start ``program_key`` on ``ha_id``."""

    async def stop_program(self, ha_id: str) -> None:
        """Stop the running program of ``ha_id``."""

    async def set_selected_program(self, ha_id: str, program_key: str) -> None:
        """Select ``program_key`` on ``ha_id``."""

    async def set_power_state(self, ha_id: str, tag: str) -> None:
        """Switch ``ha_id`` to the power state ``tag``."""

    async def set_program_option(
        self,
        ha_id: str,
        option_key: str,
        value: str,
        unit: str | None,
        value_as_int: bool,
        apply_live: bool,
    ) -> None:
        """Write one option of the running or the selected program."""


class HomeConnectClient:
    """Thin async client for the Home Connect cloud (HA-safe)."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token_provider: TokenProvider,
        *,
        api_base: str = API_BASE,
    ) -> None:
        """Initialise the client with the shared session and token source."""

        self._session = session
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/") if api_base else API_BASE

    @property
    def api_base(self) -> str:
        """Expose the API base for the event stream."""

        return self._api_base

    async def _headers(self, accept: str = CONTENT_TYPE) -> dict[str, str]:
        try:
            token = await self._token_provider()
        except asyncio.CancelledError:
            raise
        except aiohttp.ClientResponseError as err:
            if err.status in (400, 401, 403):
                raise AuthorizationError(f"Token refresh rejected: {err}") from err
            raise CommunicationError(f"Token refresh failed: {err}") from err
        except (aiohttp.ClientError, TimeoutError) as err:
            raise CommunicationError(f"Token refresh failed: {err}") from err
        except Exception as err:
            raise AuthorizationError(f"Unable to obtain access token: {err}") from err
        return {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "Accept-Language": ACCEPT_LANGUAGE,
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        ignore_statuses: Iterable[int] = (),
        json: Any | None = None,
    ) -> Any | None:
        """Perform an HTTP request and return the decoded JSON body.

        HTTP statuses listed in ``ignore_statuses`` are logged and yield
        ``None``. Transport failures surface as ``CommunicationError``.
        """

        ignore = set(ignore_statuses)
        headers = await self._headers()
        if json is not None:
            headers["Content-Type"] = CONTENT_TYPE
        url = f"{self._api_base}{path}"
        _LOGGER.debug("HTTP %s %s", method, url)

        try:
            async with self._session.request(
                method,
                url,
                headers=headers,
                json=json,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            ) as resp:
                body_text = await resp.text()
                if resp.status >= 400:
                    log_fn = _LOGGER.debug if resp.status in ignore else _LOGGER.error
                    log_fn(
                        "HTTP error %s %s -> %s; body=%s",
                        method,
                        url,
                        resp.status,
                        redact_text(body_text),
                    )
                else:
                    _LOGGER.debug("HTTP %s -> %s", url, resp.status)

                if resp.status in ignore:
                    return None
                if resp.status in (401, 403):
                    raise AuthorizationError(f"Unauthorized ({resp.status})")
                if resp.status == 429:
                    raise RateLimitError("Rate limited")
                if resp.status >= 400:
                    raise CommunicationError(
                        f"{method} {path} failed with HTTP {resp.status}"
                    )
                if resp.status == 204 or not body_text:
                    return None
                return await resp.json(content_type=None)
        except CommunicationError:
            raise
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, TimeoutError, ValueError) as err:
            _LOGGER.error(
                "Request %s %s failed (sanitized): %s",
                method,
                url,
                redact_text(str(err)),
            )
            raise CommunicationError(str(err) or type(err).__name__) from err

    @staticmethod
    def _decode(model: Any, payload: Any, what: str) -> Any:
        try:
            return model.model_validate(payload or {})
        except ValidationError as err:
            raise CommunicationError(f"Malformed {what} payload") from err

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list_appliances(self) -> list[HomeAppliance]:
        """Return the appliances paired with the account."""

        payload = await self._request("GET", APPLIANCES_PATH)
        response = self._decode(AppliancesResponse, payload, "appliance list")
        return [item.to_domain() for item in response.data.homeappliances]

    async def get_status(self, ha_id: str) -> list[Event]:
        """Return the status items of ``ha_id``."""

        payload = await self._request("GET", STATUS_PATH_FMT.format(ha_id=ha_id))
        response = self._decode(StatusResponse, payload, "status")
        return [item.to_event() for item in response.data.status]

    async def get_settings(self, ha_id: str) -> list[Event]:
        """Return the settings of ``ha_id``."""

        payload = await self._request("GET", SETTINGS_PATH_FMT.format(ha_id=ha_id))
        response = self._decode(SettingsResponse, payload, "settings")
        return [item.to_event() for item in response.data.settings]

    async def get_selected_program(self, ha_id: str) -> ProgramSlot:
        """Return the selected program of ``ha_id``."""

        return await self._get_program(SELECTED_PROGRAM_PATH_FMT, ha_id)

    async def get_active_program(self, ha_id: str) -> ProgramSlot:
        """Return the running program of ``ha_id``."""

        return await self._get_program(ACTIVE_PROGRAM_PATH_FMT, ha_id)

    async def _get_program(self, path_fmt: str, ha_id: str) -> ProgramSlot:
        payload = await self._request(
            "GET",
            path_fmt.format(ha_id=ha_id),
            ignore_statuses=_NO_PROGRAM_STATUSES,
        )
        if payload is None:
            return NO_PROGRAM
        return self._decode(ProgramResponse, payload, "program").data.to_slot()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def start_program(self, ha_id: str, program_key: str) -> None:
        """Start ``program_key`` on ``ha_id``."""

        _LOGGER.debug("Starting %s on %s", program_key, mask_identifier(ha_id))
        await self._request(
            "PUT",
            ACTIVE_PROGRAM_PATH_FMT.format(ha_id=ha_id),
            json=encode_program_key(program_key),
        )

    async def stop_program(self, ha_id: str) -> None:
        """Stop the running program of ``ha_id``."""

        _LOGGER.debug("Stopping program on %s", mask_identifier(ha_id))
        await self._request("DELETE", ACTIVE_PROGRAM_PATH_FMT.format(ha_id=ha_id))

    async def set_selected_program(self, ha_id: str, program_key: str) -> None:
        """Select ``program_key`` on ``ha_id``."""

        await self._request(
            "PUT",
            SELECTED_PROGRAM_PATH_FMT.format(ha_id=ha_id),
            json=encode_program_key(program_key),
        )

    async def set_power_state(self, ha_id: str, tag: str) -> None:
        """Switch ``ha_id`` to the power state ``tag``."""

        await self._request(
            "PUT",
            SETTING_PATH_FMT.format(ha_id=ha_id, key=SETTING_POWER_STATE),
            json=encode_item_write(SETTING_POWER_STATE, tag),
        )

    async def set_program_option(
        self,
        ha_id: str,
        option_key: str,
        value: str,
        unit: str | None,
        value_as_int: bool,
        apply_live: bool,
    ) -> None:
        """Write one option of the running or the selected program."""

        slot = "active" if apply_live else "selected"
        try:
            body = encode_item_write(
                option_key, value, unit, value_as_int=value_as_int
            )
        except ValueError as err:
            raise CommunicationError(str(err)) from err
        await self._request(
            "PUT",
            PROGRAM_OPTION_PATH_FMT.format(ha_id=ha_id, slot=slot, key=option_key),
            json=body,
        )

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------
    async def open_event_stream(self) -> aiohttp.ClientResponse:
        """Open the server-sent event stream for all appliances.

        The caller owns the returned response and must release it.
        """

        headers = await self._headers(accept="text/event-stream")
        url = f"{self._api_base}{EVENTS_PATH}"
        _LOGGER.debug("SSE GET %s", url)
        try:
            resp = await self._session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(
                    total=None, connect=REQUEST_TIMEOUT, sock_read=STREAM_IDLE_TIMEOUT
                ),
            )
        except (aiohttp.ClientError, TimeoutError) as err:
            raise CommunicationError(str(err) or type(err).__name__) from err
        if resp.status in (401, 403):
            resp.release()
            raise AuthorizationError(f"Unauthorized ({resp.status})")
        if resp.status == 429:
            resp.release()
            raise RateLimitError("Rate limited on event stream")
        if resp.status >= 400:
            resp.release()
            raise CommunicationError(f"Event stream failed with HTTP {resp.status}")
        return resp
