"""Domain exceptions raised by the location pipeline."""

from __future__ import annotations

import enum


class GeolocationErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


_DEFAULT_MESSAGES = {
    GeolocationErrorKind.PERMISSION_DENIED: "Location permission was denied.",
    GeolocationErrorKind.POSITION_UNAVAILABLE: "Location information is unavailable.",
    GeolocationErrorKind.TIMEOUT: "Timed out while acquiring the device location.",
    GeolocationErrorKind.UNSUPPORTED: "Geolocation is not supported by this browser.",
}


class GeolocationError(Exception):
    """Device position could not be acquired. Fatal to the current attempt."""

    def __init__(self, kind: GeolocationErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        super().__init__(self.message)
