"""
Telemetry and Mission Record Definitions

Typed dataclasses for every value that crosses the boundary between the
simulator, the mission controller and the dashboard. Snapshots and records
are frozen: the simulator builds a new snapshot every tick and the
controller never edits a mission once it is in the history.

Data flow:
  TelemetrySimulator  --TelemetrySnapshot-->  MissionController / dashboard
  Mission setup       --MissionPlan-------->  MissionController.launch()
  MissionController   --Mission------------>  MissionHistory
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class FlightMode(Enum):
    """Flight modes reported by the simulated autopilot."""
    LOITER = "Loiter"
    MANUAL = "Manual"
    RTL = "RTL"
    TAKE_OFF = "Take Off"


class SiteType(Enum):
    """Breeding-site classes produced by the detector."""
    ENCLOSED = "Enclosed"
    OPEN = "Open"


class MissionStatus(Enum):
    COMPLETED = "Completed"
    INTERRUPTED = "Interrupted"
    IN_PROGRESS = "In Progress"


# ── Position ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GeoPoint:
    """WGS84 position in decimal degrees."""
    lat: float
    lon: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lon)


# ── Detection ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BreedingSiteInfo:
    """One simulated AI detection of a mosquito breeding site."""
    type: SiteType
    object: str     # e.g. 'Old Tires', 'Flower Pots'

    def to_text(self) -> str:
        return f"{self.type.value}: {self.object}"


# ── Battery ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BatteryState:
    voltage: float      # pack voltage (V)
    percentage: float   # 0.0 - 100.0


# ── Live telemetry (simulator -> controller / dashboard, once per tick) ──

@dataclass(frozen=True)
class TelemetrySnapshot:
    """One immutable telemetry reading at a point in simulated time.

    ``current_breeding_site`` is only set on the tick that produced the
    detection. ``detected_sites`` and ``gps_track`` accumulate for the
    whole mission and are reset when the simulator starts again."""
    gps: GeoPoint
    altitude: float             # metres above launch
    speed: float                # ground speed, m/s
    vertical_speed: float       # m/s, positive = climbing
    roll: float                 # degrees
    pitch: float                # degrees
    heading: float              # degrees, 0 = north
    signal_strength: int        # 0 - 100 %
    battery: BatteryState
    satellites: int
    flight_time: str            # "MM:SS"
    flight_time_s: float
    distance_from_home: float   # metres
    flight_mode: FlightMode
    armed: bool
    current_breeding_site: Optional[BreedingSiteInfo] = None
    detected_sites: Tuple[BreedingSiteInfo, ...] = ()
    gps_track: Tuple[GeoPoint, ...] = ()

    @property
    def breeding_site_detected(self) -> bool:
        return self.current_breeding_site is not None


# ── Operator input (mission setup -> controller) ─────────────────────────

@dataclass(frozen=True)
class MissionPlan:
    """Operator-authored plan. Only ``name`` survives past launch."""
    name: str
    waypoints: Tuple[GeoPoint, ...]
    altitude: float     # target altitude, m
    speed: float        # target ground speed, m/s
    id: Optional[str] = None

    @classmethod
    def from_points(cls, name: str, points, altitude: float, speed: float,
                    plan_id: Optional[str] = None) -> "MissionPlan":
        """Build a plan from (lat, lon) pairs or GeoPoints."""
        waypoints = tuple(p if isinstance(p, GeoPoint) else GeoPoint(float(p[0]), float(p[1]))
                          for p in points)
        return cls(name=name, waypoints=waypoints, altitude=altitude, speed=speed, id=plan_id)


# ── History record (controller -> history store) ─────────────────────────

@dataclass(frozen=True)
class Mission:
    """Finalized flight record stored in the mission history."""
    id: str
    name: str
    date: str           # e.g. 'Oct 9, 2025'
    duration: str       # e.g. '22 mins', '15 secs'
    status: MissionStatus
    location: str
    gps_track: Optional[Tuple[GeoPoint, ...]] = None
    detected_sites: Optional[Tuple[BreedingSiteInfo, ...]] = field(default=None)
