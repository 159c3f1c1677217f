"""
Telemetry Simulator — fabricated live telemetry for the GCS dashboard

Stands in for the drone's flight controller and onboard detector. Once
started it advances a simulated flight once per tick:

  - take-off climb to the mission altitude
  - waypoint following at the mission speed, then return-to-launch
    (or endless laps of a demo track when no plan is given)
  - battery drain, signal and satellite jitter, attitude noise
  - random breeding-site detections from a fixed vocabulary

All randomness comes from the injected generator (``numpy.random.Generator``
interface: ``random``, ``uniform``, ``integers``), so a seeded generator
reproduces a flight exactly.

Draw order per tick (fixed, tests depend on it):
  uniform (battery drain, armed only) -> uniform (signal) -> integers (satellites)
  -> uniform (roll) -> uniform (pitch) -> random (detection)
  -> integers (site type) -> integers (site label)   [only on detection]
"""

from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from core.navigation import bearing_deg, haversine_m, offset_point, step_toward
from core.telemetry import (
    BatteryState, BreedingSiteInfo, FlightMode, GeoPoint, MissionPlan,
    SiteType, TelemetrySnapshot,
)
from simulation.clock import TickClock, TimerHandle

SnapshotListener = Callable[[TelemetrySnapshot], None]


def format_flight_time(seconds: float) -> str:
    """Elapsed seconds as 'MM:SS'."""
    total = int(seconds)
    return f"{total // 60:02d}:{total % 60:02d}"


class TelemetrySimulator:
    """
    Single-vehicle telemetry generator driven by a ``TickClock``.

    Only one timer is ever registered; ``stop`` cancels it through its
    handle so a stale generator can't keep mutating state after a new
    mission starts.
    """

    # Timing
    TICK_INTERVAL_S = 1.0

    # Launch site (same survey area as the seeded mission tracks) and demo track
    HOME = GeoPoint(34.0522, -118.2437)
    DEMO_TRACK_M = [(60.0, 0.0), (60.0, 60.0), (0.0, 60.0), (0.0, 0.0)]  # (north, east)
    DEMO_ALTITUDE_M = 25.0
    DEMO_SPEED_MPS = 5.0
    CLIMB_RATE_MPS = 3.0

    # Battery (4S LiPo)
    BATTERY_FULL_V = 16.8
    BATTERY_EMPTY_V = 13.2
    BATTERY_DRAIN_PCT = (0.05, 0.30)    # per tick
    BATTERY_LOW_PCT = 20.0

    # Radio / GPS
    SIGNAL_BASELINE = 92
    SIGNAL_JITTER = 6
    SATELLITE_BASELINE = 14
    SATELLITE_JITTER = 2

    ATTITUDE_JITTER_DEG = 2.5
    MAX_PITCH_DEG = 15.0

    # Breeding-site detector
    DETECTION_PROBABILITY = 0.08
    DETECTION_VOCABULARY: Dict[SiteType, Tuple[str, ...]] = {
        SiteType.ENCLOSED: ("Flower Pots", "Water Drums", "Tin Cans", "Plastic Bottles", "Clogged Gutter"),
        SiteType.OPEN: ("Old Tires", "Stagnant Puddle", "Open Sewage", "Discarded Containers"),
    }
    FALLBACK_SITE_LABEL = "Unidentified Container"

    def __init__(self, clock: TickClock, rng=None,
                 tick_interval: Optional[float] = None,
                 home: Optional[GeoPoint] = None):
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng()
        self.tick_interval = tick_interval if tick_interval is not None else self.TICK_INTERVAL_S
        if self.tick_interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {self.tick_interval}")
        self.home = home if home is not None else self.HOME

        self._timer: Optional[TimerHandle] = None
        self._listeners: List[SnapshotListener] = []
        self._snapshot = self.grounded_snapshot(self.home)
        self._reset_flight(None)

    # ── Read side ────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> TelemetrySnapshot:
        """Most recent snapshot (frozen after ``stop``)."""
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._timer is not None

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def plan(self) -> Optional[MissionPlan]:
        return self._plan

    def subscribe(self, listener: SnapshotListener):
        """Call ``listener(snapshot)`` after every published snapshot."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @classmethod
    def grounded_snapshot(cls, home: GeoPoint) -> TelemetrySnapshot:
        """Deterministic reading of a vehicle sitting disarmed on the pad."""
        return TelemetrySnapshot(
            gps=home,
            altitude=0.0,
            speed=0.0,
            vertical_speed=0.0,
            roll=0.0,
            pitch=0.0,
            heading=0.0,
            signal_strength=0,
            battery=BatteryState(voltage=cls.BATTERY_FULL_V, percentage=100.0),
            satellites=0,
            flight_time=format_flight_time(0),
            flight_time_s=0.0,
            distance_from_home=0.0,
            flight_mode=FlightMode.LOITER,
            armed=False,
        )

    # ── Control ──────────────────────────────────────────────────────────

    def start(self, plan: Optional[MissionPlan] = None) -> bool:
        """Reset the flight and begin ticking. Refused while already running."""
        if self.running:
            print("TelemetrySimulator: start ignored, already running")
            return False

        # Schedule first so a failing clock leaves the previous state untouched
        timer = self.clock.schedule(self.tick_interval, self.tick)
        self._reset_flight(plan)
        self._armed = True
        self._snapshot = self._build_snapshot(current_site=None, speed=0.0,
                                              vertical_speed=0.0, roll=0.0, pitch=0.0,
                                              signal=self.SIGNAL_BASELINE,
                                              satellites=self.SATELLITE_BASELINE)
        self._timer = timer

        route = f"plan '{plan.name}' ({len(plan.waypoints)} waypoints)" if plan else "demo track"
        print(f"TelemetrySimulator: started on {route}, tick {self.tick_interval:.1f}s")
        self._publish()
        return True

    def stop(self) -> bool:
        """Release the timer. The last snapshot stays readable."""
        if not self.running:
            return False
        self.clock.cancel(self._timer)
        self._timer = None
        print(f"TelemetrySimulator: stopped after {self._ticks} ticks ({self._snapshot.flight_time})")
        return True

    def set_armed(self, armed: bool):
        """Toggle the armed flag without touching accumulated state."""
        self._armed = bool(armed)
        if self._snapshot.armed != self._armed:
            print(f"TelemetrySimulator: {'ARMED' if self._armed else 'DISARMED'}")
        self._snapshot = replace(self._snapshot, armed=self._armed)
        self._publish()

    # ── Simulation step ──────────────────────────────────────────────────

    def tick(self):
        """Advance the simulated flight by one tick interval."""
        if not self.running:
            return

        dt = self.tick_interval
        previous_altitude = self._altitude
        moved_m = self._advance_position(dt)
        speed = moved_m / dt
        vertical_speed = (self._altitude - previous_altitude) / dt

        # Battery: bounded random drain, never below zero
        if self._armed:
            drain = float(self.rng.uniform(*self.BATTERY_DRAIN_PCT))
            self._battery_pct = max(0.0, self._battery_pct - drain)
            if self._battery_pct < self.BATTERY_LOW_PCT and not self._low_battery_reported:
                self._low_battery_reported = True
                print(f"[BATTERY LOW] {self._battery_pct:.0f}% remaining")

        signal = float(self.rng.uniform(-self.SIGNAL_JITTER, self.SIGNAL_JITTER))
        signal = int(np.clip(round(self.SIGNAL_BASELINE + signal), 0, 100))
        satellites = int(self.rng.integers(-self.SATELLITE_JITTER, self.SATELLITE_JITTER + 1))
        satellites = max(0, self.SATELLITE_BASELINE + satellites)

        roll = float(self.rng.uniform(-self.ATTITUDE_JITTER_DEG, self.ATTITUDE_JITTER_DEG))
        pitch = float(self.rng.uniform(-self.ATTITUDE_JITTER_DEG, self.ATTITUDE_JITTER_DEG))
        pitch -= min(speed * 1.5, self.MAX_PITCH_DEG)   # nose down in forward flight

        self._flight_time_s += dt
        self._track.append(self._position)

        current_site = None
        if float(self.rng.random()) < self.DETECTION_PROBABILITY:
            current_site = self._detect_site()
            self._sites.append(current_site)
            print(f"[DETECT] {current_site.to_text()} at "
                  f"({self._position.lat:.5f}, {self._position.lon:.5f})")

        self._ticks += 1
        self._snapshot = self._build_snapshot(current_site=current_site, speed=speed,
                                              vertical_speed=vertical_speed, roll=roll,
                                              pitch=pitch, signal=signal, satellites=satellites)
        self._publish()

    # ── Internals ────────────────────────────────────────────────────────

    def _reset_flight(self, plan: Optional[MissionPlan]):
        self._plan = plan
        if plan is not None:
            self._route = list(plan.waypoints) + [self.home]
            self._loop_route = False
            self._target_altitude = float(plan.altitude)
            self._cruise_speed = float(plan.speed)
        else:
            self._route = [offset_point(self.home, n, e) for n, e in self.DEMO_TRACK_M]
            self._loop_route = True
            self._target_altitude = self.DEMO_ALTITUDE_M
            self._cruise_speed = self.DEMO_SPEED_MPS

        self._leg = 0
        self._position = self.home
        self._altitude = 0.0
        self._heading = 0.0
        self._mode = FlightMode.TAKE_OFF
        self._battery_pct = 100.0
        self._low_battery_reported = False
        self._flight_time_s = 0.0
        self._track: List[GeoPoint] = []
        self._sites: List[BreedingSiteInfo] = []
        self._ticks = 0
        self._armed = self._snapshot.armed

    def _current_target(self) -> Optional[GeoPoint]:
        if self._loop_route:
            return self._route[self._leg % len(self._route)]
        if self._leg < len(self._route):
            return self._route[self._leg]
        return None

    def _advance_position(self, dt: float) -> float:
        """Climb or move one step along the route. Returns metres flown."""
        if self._altitude < self._target_altitude:
            self._altitude = min(self._target_altitude, self._altitude + self.CLIMB_RATE_MPS * dt)
            self._mode = FlightMode.TAKE_OFF
            return 0.0

        target = self._current_target()
        if target is None:
            self._mode = FlightMode.LOITER
            return 0.0

        new_position, reached = step_toward(self._position, target, self._cruise_speed * dt)
        moved = haversine_m(self._position, new_position)
        if moved > 0:
            self._heading = bearing_deg(self._position, new_position)
        self._position = new_position
        if reached:
            self._leg += 1

        if self._loop_route:
            self._mode = FlightMode.MANUAL
        elif self._leg >= len(self._route):
            self._mode = FlightMode.LOITER
        elif self._leg == len(self._route) - 1:
            self._mode = FlightMode.RTL
        else:
            self._mode = FlightMode.MANUAL     # survey legs; no AUTO mode in the telemetry vocabulary
        return moved

    def _detect_site(self) -> BreedingSiteInfo:
        site_types = list(SiteType)
        site_type = site_types[int(self.rng.integers(len(site_types)))]
        labels = self.DETECTION_VOCABULARY.get(site_type, ())
        if labels:
            label = labels[int(self.rng.integers(len(labels)))]
        else:
            label = self.FALLBACK_SITE_LABEL
        return BreedingSiteInfo(type=site_type, object=label)

    def _build_snapshot(self, current_site, speed, vertical_speed, roll, pitch,
                        signal, satellites) -> TelemetrySnapshot:
        pct = round(self._battery_pct, 1)
        voltage = self.BATTERY_EMPTY_V + (self.BATTERY_FULL_V - self.BATTERY_EMPTY_V) * self._battery_pct / 100.0
        return TelemetrySnapshot(
            gps=self._position,
            altitude=round(self._altitude, 1),
            speed=round(speed, 1),
            vertical_speed=round(vertical_speed, 1),
            roll=round(roll, 1),
            pitch=round(pitch, 1),
            heading=round(self._heading, 1),
            signal_strength=signal,
            battery=BatteryState(voltage=round(voltage, 2), percentage=pct),
            satellites=satellites,
            flight_time=format_flight_time(self._flight_time_s),
            flight_time_s=self._flight_time_s,
            distance_from_home=round(haversine_m(self.home, self._position), 1),
            flight_mode=self._mode,
            armed=self._armed,
            current_breeding_site=current_site,
            detected_sites=tuple(self._sites),
            gps_track=tuple(self._track),
        )

    def _publish(self):
        for listener in list(self._listeners):
            listener(self._snapshot)
