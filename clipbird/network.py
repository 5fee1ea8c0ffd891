"""Helpers for connecting peers: pairing info, endpoint checks, cert renewal."""

from __future__ import annotations

import ipaddress
import json
from collections.abc import Iterable
from datetime import datetime, timezone

from clipbird.constants import CERT_EXPIRY_INTERVAL, mdns_service_name

_Address = str | ipaddress.IPv4Address | ipaddress.IPv6Address


def _parse_address(address: _Address) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return address
    return ipaddress.ip_address(str(address).strip())


def qr_code_info(port: int, addresses: Iterable[_Address]) -> str:
    """Compact JSON telling a client where this server listens.

    Only IPv4 addresses that are not loopback are listed, in the order
    given. Raises ValueError for a string that is not an IP address.
    """
    ips: list[str] = []
    for address in addresses:
        parsed = _parse_address(address)
        if parsed.version == 6:
            continue
        if parsed.is_loopback:
            continue
        text = str(parsed)
        if text.startswith("127."):
            continue
        ips.append(text)
    return json.dumps({"port": int(port), "ips": ips}, separators=(",", ":"), sort_keys=True)


def is_valid_endpoint(ip: str, port: int | str) -> bool:
    """Whether ``ip`` is an IP address and ``port`` lies strictly between 0 and 65535."""
    try:
        _parse_address(ip)
    except ValueError:
        return False
    try:
        number = int(port)
    except (TypeError, ValueError):
        return False
    return 0 < number < 65535


def cert_needs_renewal(
    common_name: str,
    service_name: str | None = None,
    expiry: datetime | None = None,
    now: datetime | None = None,
) -> bool:
    """Whether the host certificate must be replaced.

    It must when its common name no longer matches the announced service
    name, or when it expires within the renewal interval.
    """
    expected = mdns_service_name() if service_name is None else service_name
    if common_name != expected:
        return True
    if expiry is None:
        return True
    current = datetime.now(timezone.utc) if now is None else now
    if expiry.tzinfo is None and current.tzinfo is not None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    elif expiry.tzinfo is not None and current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return expiry - current < CERT_EXPIRY_INTERVAL