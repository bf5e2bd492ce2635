"""ClockGuard — core internal data models.

These are plain dataclasses with no framework dependencies.
JSON request bodies are converted to/from these at the API boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClockEvent(str, enum.Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"


@dataclass(frozen=True)
class GeoReading:
    """One sampled device position."""
    latitude: float
    longitude: float
    accuracy: float
    timestamp_ms: int
    altitude: float | None = None
    speed: float | None = None


@dataclass(frozen=True)
class LocationHistoryEntry:
    latitude: float
    longitude: float
    timestamp_ms: int

    @classmethod
    def from_reading(cls, reading: GeoReading) -> LocationHistoryEntry:
        return cls(reading.latitude, reading.longitude, reading.timestamp_ms)

    def to_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude, "timestamp": self.timestamp_ms}


@dataclass(frozen=True)
class DeviceFingerprint:
    user_agent: str = ""
    platform: str = ""
    language: str = ""
    timezone: str = ""
    screen_resolution: str = ""
    device_memory: float | None = None
    hardware_concurrency: int | None = None


@dataclass(frozen=True)
class DeviceEnvironment:
    """Ambient indicators reported by the client for the debug-mode heuristic."""
    hostname: str = ""
    protocol: str = ""
    has_extension_runtime: bool = False
    has_devtools_hook: bool = False
    user_agent: str = ""


@dataclass(frozen=True)
class Deduction:
    """A single triggered check and the confidence it costs."""
    tag: str
    warning: str
    penalty: float


@dataclass(frozen=True)
class VelocityCheck:
    is_realistic: bool
    speed_kmh: float
    max_realistic_kmh: float


@dataclass(frozen=True)
class NetworkLocation:
    latitude: float
    longitude: float


@dataclass
class ValidationResult:
    is_valid: bool
    confidence: float
    risk_level: RiskLevel
    warnings: list[str] = field(default_factory=list)
    detected_issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "confidence": self.confidence,
            "warnings": list(self.warnings),
            "riskLevel": self.risk_level.value,
            "detectedIssues": list(self.detected_issues),
        }


@dataclass(frozen=True)
class ValidLocation:
    """Admin-configured attendance location. Read-only for the core."""
    name: str
    latitude: float
    longitude: float
    radius_m: float
    active: bool = True
    id: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius_m": self.radius_m,
            "active": self.active,
        }


@dataclass(frozen=True)
class GeofenceResult:
    is_valid: bool
    matched_location: ValidLocation | None = None
    distance: float | None = None


@dataclass(frozen=True)
class NearestLocation:
    location: ValidLocation
    distance: float


@dataclass(frozen=True)
class SecureLocationResult:
    reading: GeoReading
    validation: ValidationResult
    fingerprint: DeviceFingerprint
    encoded_fingerprint: str
    is_secure: bool


@dataclass(frozen=True)
class ClockDecision:
    outcome: str  # "accepted", "confirmation_required" or "rejected"
    reason: str
    security: SecureLocationResult
    geofence: GeofenceResult | None = None
    nearest: NearestLocation | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome == "accepted"


@dataclass
class AttendanceRecord:
    server_timestamp_ms: int
    event: ClockEvent
    user_id: str
    session_id: str
    reading: GeoReading
    risk_level: RiskLevel
    encoded_fingerprint: str
    security_data: str
    location_name: str = ""
    record_id: int = 0


@dataclass(frozen=True)
class ClockRequestData:
    """One clock-in/out attempt as submitted by the attendance client."""
    event: ClockEvent
    session_id: str
    user_id: str
    reading: GeoReading | None = None
    geolocation_error: str | None = None  # a GeolocationErrorKind value
    error_message: str | None = None
    device: object | None = None  # any DeviceInfoProvider
    environment: DeviceEnvironment | None = None
    client_ip: str | None = None
    confirmed: bool = False
