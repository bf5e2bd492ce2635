"""IP-based location estimate over HTTP (ipapi.co style JSON)."""

from __future__ import annotations

import ipaddress

import httpx
import structlog

from clockguard.core.geo import is_valid_coordinate
from clockguard.core.models import NetworkLocation

log = structlog.get_logger()

DEFAULT_URL = "https://ipapi.co/{ip}/json/"
DEFAULT_SELF_URL = "https://ipapi.co/json/"


def _is_public(ip: str | None) -> bool:
    if not ip:
        return False
    try:
        return ipaddress.ip_address(ip).is_global
    except ValueError:
        return False


def parse_network_location(data: object) -> NetworkLocation | None:
    if not isinstance(data, dict):
        return None
    try:
        lat = float(data["latitude"])
        lng = float(data["longitude"])
    except (KeyError, TypeError, ValueError):
        return None
    # The service reports 0/0 when it has no fix.
    if not lat or not lng or not is_valid_coordinate(lat, lng):
        return None
    return NetworkLocation(latitude=lat, longitude=lng)


class HttpNetworkLocator:
    """NetworkLocator calling an IP geolocation service with httpx.

    Every failure mode (transport, status, body) results in ``None``.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        self_url: str = DEFAULT_SELF_URL,
        timeout_seconds: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._self_url = self_url
        self._timeout = timeout_seconds
        self._client = client

    def _target(self, client_ip: str | None) -> str:
        if _is_public(client_ip):
            return self._url.format(ip=client_ip)
        return self._self_url

    async def locate(self, client_ip: str | None = None) -> NetworkLocation | None:
        url = self._target(client_ip)
        try:
            if self._client is not None:
                resp = await self._client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError):
            log.debug("network_location_failed", url=url, exc_info=True)
            return None

        location = parse_network_location(data)
        if location is None:
            log.debug("network_location_unusable", url=url)
        return location


class NullNetworkLocator:
    """NetworkLocator that never has a signal (cross-check disabled)."""

    async def locate(self, client_ip: str | None = None) -> NetworkLocation | None:
        return None
