"""Server-sent event stream client feeding appliance sessions."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import suppress
from dataclasses import dataclass
import logging
import random
import time

import aiohttp
from pydantic import ValidationError

from .api import CommunicationError, HomeConnectClient
from .codecs import EventPayload
from .const import (
    DOMAIN,
    SSE_EVENT_CONNECTED,
    SSE_EVENT_DISCONNECTED,
    SSE_EVENT_KEEP_ALIVE,
    SSE_ITEM_EVENTS,
    STREAM_BACKOFF,
)
from .sanitize import mask_identifier
from .session import ApplianceSession

_LOGGER = logging.getLogger(__name__)

ConnectivityCallback = Callable[[str, bool], None]


@dataclass(frozen=True, slots=True)
class SseFrame:
    """One dispatched server-sent event."""

    event: str | None
    data: str
    id: str | None = None


class SseParser:
    """Incremental parser for ``text/event-stream`` lines."""

    def __init__(self) -> None:
        """Start with an empty frame."""

        self._event: str | None = None
        self._data: list[str] = []
        self._id: str | None = None

    def feed(self, line: str) -> SseFrame | None:
        """Consume one line; return a frame when a blank line ends it."""

        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None
        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        elif field == "id":
            self._id = value
        return None

    def _dispatch(self) -> SseFrame | None:
        if self._event is None and not self._data and self._id is None:
            return None
        frame = SseFrame(self._event, "\n".join(self._data), self._id)
        self._event = None
        self._data = []
        self._id = None
        return frame


def parse_sse_frames(lines: Iterable[str]) -> Iterator[SseFrame]:
    """Yield the frames contained in ``lines``."""

    parser = SseParser()
    for line in lines:
        frame = parser.feed(line)
        if frame is not None:
            yield frame
    frame = parser.feed("")
    if frame is not None:
        yield frame


class EventStreamClient:
    """Keep the account-wide event stream open and dispatch its frames.

    Frames are handled one at a time in arrival order, so each appliance
    sees its events in the order the cloud sent them.
    """

    def __init__(
        self,
        client: HomeConnectClient,
        sessions: Mapping[str, ApplianceSession],
        *,
        on_connectivity: ConnectivityCallback | None = None,
        backoff: tuple[int, ...] = STREAM_BACKOFF,
    ) -> None:
        """Initialise the stream for the given sessions keyed by ha_id."""

        self._client = client
        self._sessions = sessions
        self._on_connectivity = on_connectivity
        self._backoff_seq = backoff
        self._backoff_idx = 0
        self._task: asyncio.Task[None] | None = None
        self._closing = False
        self.last_frame_at: float | None = None
        self.restart_count = 0

    def start(self) -> asyncio.Task[None]:
        """Start the stream background task."""

        if self._task and not self._task.done():
            return self._task
        _LOGGER.debug("SSE: start requested")
        self._closing = False
        self._task = asyncio.get_running_loop().create_task(
            self._runner(), name=f"{DOMAIN}-event-stream"
        )
        return self._task

    async def stop(self) -> None:
        """Cancel the stream task."""

        _LOGGER.debug("SSE: stop requested")
        self._closing = True
        if self._task:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def is_running(self) -> bool:
        """Return True if the stream task is active."""

        return bool(self._task and not self._task.done())

    def _next_backoff(self) -> float:
        idx = min(self._backoff_idx, len(self._backoff_seq) - 1)
        self._backoff_idx = min(self._backoff_idx + 1, len(self._backoff_seq) - 1)
        return self._backoff_seq[idx]

    async def _runner(self) -> None:
        """Manage connection attempts with backoff."""

        while not self._closing:
            try:
                await self._connect_once()
            except asyncio.CancelledError:
                raise
            except (CommunicationError, aiohttp.ClientError, TimeoutError) as err:
                _LOGGER.info(
                    "SSE: connection error (%s: %s); will retry",
                    type(err).__name__,
                    err,
                )
            except Exception:
                _LOGGER.exception("SSE: unexpected error; will retry")
            if self._closing:
                break
            self.restart_count += 1
            delay = self._next_backoff()
            await asyncio.sleep(delay * random.uniform(0.8, 1.2))

    async def _connect_once(self) -> None:
        """Open the stream and consume frames until it closes."""

        resp = await self._client.open_event_stream()
        _LOGGER.debug("SSE: connected")
        self._backoff_idx = 0
        parser = SseParser()
        try:
            async for raw in resp.content:
                self.last_frame_at = time.monotonic()
                frame = parser.feed(raw.decode("utf-8", "replace"))
                if frame is not None:
                    await self.dispatch_frame(frame)
        finally:
            resp.release()
        _LOGGER.debug("SSE: stream closed by server")

    async def dispatch_frame(self, frame: SseFrame) -> None:
        """Route one frame to the session of the appliance it names."""

        event_type = (frame.event or "").upper()
        if event_type == SSE_EVENT_KEEP_ALIVE:
            return

        if event_type in (SSE_EVENT_CONNECTED, SSE_EVENT_DISCONNECTED):
            ha_id = frame.id or _ha_id_from_data(frame.data)
            session = self._sessions.get(ha_id or "")
            if session is None:
                return
            connected = event_type == SSE_EVENT_CONNECTED
            session.set_connected(connected)
            if self._on_connectivity is not None:
                self._on_connectivity(session.ha_id, connected)
            return

        if event_type not in SSE_ITEM_EVENTS:
            _LOGGER.debug("SSE: ignoring %s frame", event_type or "unnamed")
            return

        try:
            payload = EventPayload.model_validate_json(frame.data or "{}")
        except ValidationError:
            _LOGGER.debug("SSE: malformed %s frame ignored", event_type)
            return

        ha_id = frame.id or payload.ha_id
        session = self._sessions.get(ha_id or "")
        if session is None:
            _LOGGER.debug(
                "SSE: %s frame for unknown appliance %s",
                event_type,
                mask_identifier(ha_id),
            )
            return
        for item in payload.items:
            await session.handle_event(item.to_event())


def _ha_id_from_data(data: str) -> str | None:
    if not data:
        return None
    try:
        return EventPayload.model_validate_json(data).ha_id
    except ValidationError:
        return None
