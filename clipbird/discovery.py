"""Discovery of clipbird servers announced on the local network.

The browser is fed by a service-discovery backend. Browse events say that
an instance appeared or went away. Resolve events give the instance's
full name, its port and the addresses its host name resolved to. The
browser keeps the map of known servers and reports additions and
removals through callbacks.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from clipbird.constants import mdns_service_name, mdns_service_type

_log = logging.getLogger(__name__)

_ESCAPE = re.compile(r"\\([0-9]{3})")


@dataclass(frozen=True)
class Device:
    """A peer reachable at an address and port under a service name."""

    ip: str
    port: int
    name: str


def decode_service_name(name: str, service_type: str | None = None) -> str:
    """Strip the service type and domain, and turn ``\\ddd`` escapes into characters."""
    kind = mdns_service_type() if service_type is None else service_type
    stripped = name.replace(f".{kind}.local.", "")
    return _ESCAPE.sub(lambda match: chr(int(match.group(1), 10)), stripped)


class Browser:
    """Tracks the clipbird servers seen on the network."""

    def __init__(
        self,
        on_added: Callable[[Device], None] | None = None,
        on_removed: Callable[[Device], None] | None = None,
        resolve: Callable[[str], None] | None = None,
        own_name: str | None = None,
        service_type: str | None = None,
    ) -> None:
        self._on_added = on_added
        self._on_removed = on_removed
        self._resolve = resolve
        self._own_name = mdns_service_name() if own_name is None else own_name
        self._service_type = mdns_service_type() if service_type is None else service_type
        self._services: dict[str, tuple[str, int]] = {}

    def handle_browse(self, service_name: str, added: bool) -> None:
        """React to an instance appearing or disappearing.

        This host's own announcement is ignored. A new instance is handed
        to the resolver; a vanished one is removed.
        """
        if service_name == self._own_name:
            return
        if not added:
            self.handle_removed(service_name)
            return
        if self._resolve is not None:
            self._resolve(service_name)

    def handle_resolved(
        self, port: int, service_name: str, addresses: Iterable[str]
    ) -> Device | None:
        """Record a resolved server; return it, or None when it is ignored."""
        resolved = [str(address) for address in addresses]
        if not resolved:
            _log.warning("Unable to resolve service")
            return None

        name = decode_service_name(service_name, self._service_type)
        if not name:
            _log.warning("Service name is empty after removing service type")
            return None
        if name in self._services:
            _log.warning("Service already exists in the map, ignoring")
            return None

        ip = resolved[0]
        self._services[name] = (ip, int(port))
        device = Device(ip=ip, port=int(port), name=name)
        if self._on_added is not None:
            self._on_added(device)
        return device

    def handle_removed(self, service_name: str) -> Device | None:
        """Forget a server; return it, or None when it was not known."""
        entry = self._services.get(service_name)
        if entry is None:
            return None
        ip, port = entry
        device = Device(ip=ip, port=port, name=service_name)
        if self._on_removed is not None:
            self._on_removed(device)
        del self._services[service_name]
        return device

    def services(self) -> dict[str, Device]:
        """Known servers by name."""
        return {
            name: Device(ip=ip, port=port, name=name)
            for name, (ip, port) in self._services.items()
        }