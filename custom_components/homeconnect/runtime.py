"""Runtime container for configured Home Connect entries."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .api import HomeConnectClient
from .const import DOMAIN
from .coordinator import ApplianceCoordinator
from .event_stream import EventStreamClient
from .session import ApplianceSession


@dataclass(slots=True)
class EntryRuntime:
    """Objects owned by one config entry."""

    client: HomeConnectClient
    sessions: dict[str, ApplianceSession]
    coordinators: dict[str, ApplianceCoordinator]
    stream: EventStreamClient
    poll_interval: int

    def iter_coordinators(self) -> Iterator[ApplianceCoordinator]:
        """Yield coordinators ordered by appliance identifier."""

        for ha_id in sorted(self.coordinators):
            yield self.coordinators[ha_id]

    async def async_shutdown(self) -> None:
        """Stop the stream and every session's background work."""

        await self.stream.stop()
        for session in self.sessions.values():
            await session.async_stop()


def require_runtime(hass: HomeAssistant, entry: ConfigEntry) -> EntryRuntime:
    """Return the runtime stored for ``entry``.

    Raises ``LookupError`` when the entry has not been set up.
    """

    runtime = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if not isinstance(runtime, EntryRuntime):
        msg = f"Home Connect runtime missing for entry {entry.entry_id}"
        raise LookupError(msg)
    return runtime
