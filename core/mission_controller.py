"""
Mission Lifecycle Controller

One mission at a time:

    Idle --open_planning--> Planning --launch--> Active --end_mission--> Idle
      ^                        |
      +-----close_planning-----+        (launch straight from Idle skips Planning)

The controller owns the mission history and drives the telemetry
simulator: ``launch`` starts it with the plan, ``end_mission`` folds the
live track and detections into a history record and stops it.
Rejected transitions never raise except for an invalid plan, which the
mission-setup view needs to show to the operator. Controller state only
changes once the simulator has actually started.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from core.analytics import OverviewStat, compute_overview
from core.mission_history import InMemoryMissionHistory, MissionHistory, seed_missions
from core.simulator import TelemetrySimulator
from core.telemetry import (
    BreedingSiteInfo, GeoPoint, Mission, MissionPlan, MissionStatus, TelemetrySnapshot,
)

LIVE_LOCATION = "Live Location"


class LifecycleState(Enum):
    IDLE = "Idle"
    PLANNING = "Planning"
    ACTIVE = "Active"


class MissionError(ValueError):
    """Base class for rejected mission operations."""


class InvalidPlanError(MissionError):
    """Raised by ``launch`` when a plan can't be flown."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def validate_plan(plan: MissionPlan) -> List[str]:
    """Return the list of reasons a plan can't be launched (empty if OK)."""
    problems = []
    if not plan.waypoints:
        problems.append("Mission plan needs at least one waypoint")
    if not plan.altitude > 0:
        problems.append(f"Altitude must be positive (got {plan.altitude})")
    if not plan.speed > 0:
        problems.append(f"Speed must be positive (got {plan.speed})")
    return problems


def _leading_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    if match is None:
        raise ValueError(f"Not a number: {text!r}")
    return int(match.group(1))


def normalize_duration(duration: str) -> str:
    """'M:SS' elapsed time -> '<seconds> secs'. '0:15' -> '15 secs'."""
    parts = duration.split(":")
    if len(parts) < 2:
        raise ValueError(f"Expected 'MM:SS' duration, got {duration!r}")
    minutes = _leading_int(parts[0])
    seconds = _leading_int(parts[1])
    return f"{round(minutes * 60 + seconds)} secs"


def format_mission_date(when: datetime) -> str:
    """'Oct 9, 2025' style date used throughout the mission log."""
    return f"{when:%b} {when.day}, {when.year}"


class MissionController:
    """
    Top-level state machine for the GCS.

    Args:
        simulator: telemetry source started/stopped with each mission
        history: mission store; defaults to an in-memory store seeded with
                 the mock missions
        now: wall-clock source, injectable for tests
    """

    def __init__(self, simulator: TelemetrySimulator,
                 history: Optional[MissionHistory] = None,
                 now: Optional[Callable[[], datetime]] = None):
        self.simulator = simulator
        self.history = history if history is not None else InMemoryMissionHistory(seed_missions())
        self._now = now or datetime.now

        self.state = LifecycleState.IDLE
        self.active_plan: Optional[MissionPlan] = None
        self.draft_waypoints: List[GeoPoint] = []

    # ── Read side ────────────────────────────────────────────────────────

    @property
    def telemetry(self) -> TelemetrySnapshot:
        return self.simulator.snapshot

    @property
    def missions(self) -> Tuple[Mission, ...]:
        return self.history.list()

    @property
    def is_mission_active(self) -> bool:
        return self.state is LifecycleState.ACTIVE

    def overview(self) -> List[OverviewStat]:
        return compute_overview(self.missions)

    # ── Planning ─────────────────────────────────────────────────────────

    def open_planning(self) -> bool:
        if self.state is not LifecycleState.IDLE:
            print(f"MissionController: can't open planning while {self.state.value}")
            return False
        self.state = LifecycleState.PLANNING
        self.draft_waypoints = []
        return True

    def close_planning(self) -> bool:
        """Leave planning and throw the draft away."""
        if self.state is not LifecycleState.PLANNING:
            return False
        self.state = LifecycleState.IDLE
        self.draft_waypoints = []
        return True

    def add_draft_waypoint(self, point: GeoPoint) -> bool:
        if self.state is not LifecycleState.PLANNING:
            return False
        self.draft_waypoints.append(point)
        return True

    def clear_draft(self):
        self.draft_waypoints = []

    # ── Mission ──────────────────────────────────────────────────────────

    def launch(self, plan: MissionPlan) -> bool:
        """Start a mission. Returns False if one is already active or the
        simulator refuses to start; state is only changed on success.

        Raises:
            InvalidPlanError: no waypoints, or non-positive altitude/speed.
        """
        if self.state is LifecycleState.ACTIVE:
            print("MissionController: launch rejected, a mission is already active")
            return False

        problems = validate_plan(plan)
        if problems:
            print(f"MissionController: plan '{plan.name}' rejected: {'; '.join(problems)}")
            raise InvalidPlanError(problems)

        if not self.simulator.start(plan):
            print(f"MissionController: launch of '{plan.name}' rejected, simulator already running")
            return False

        self.active_plan = plan
        self.draft_waypoints = []
        self.state = LifecycleState.ACTIVE
        print(f"MissionController: launched '{plan.name}' "
              f"({len(plan.waypoints)} waypoints, {plan.altitude:.0f}m, {plan.speed:.1f}m/s)")
        return True

    def end_mission(self, duration: str, gps_track: Iterable[GeoPoint],
                    detected_sites: Iterable[BreedingSiteInfo],
                    interrupted: bool = False) -> Optional[Mission]:
        """Finalize the active mission into a history record.

        Returns the new record, or None if no mission was active."""
        if self.state is not LifecycleState.ACTIVE:
            print("MissionController: end_mission ignored, no active mission")
            return None

        now = self._now()
        try:
            duration_text = normalize_duration(duration)
        except ValueError as e:
            print(f"MissionController: {e}; using simulator flight time")
            duration_text = normalize_duration(self.simulator.snapshot.flight_time)

        plan_name = self.active_plan.name if self.active_plan is not None else ""
        mission = Mission(
            id=self._new_mission_id(now),
            name=plan_name or f"Mission {len(self.history) + 1}",
            date=format_mission_date(now),
            duration=duration_text,
            status=MissionStatus.INTERRUPTED if interrupted else MissionStatus.COMPLETED,
            location=LIVE_LOCATION,
            gps_track=tuple(gps_track),
            detected_sites=tuple(detected_sites),
        )
        self.history.prepend(mission)

        self.simulator.stop()
        self.simulator.set_armed(False)
        self.state = LifecycleState.IDLE
        self.active_plan = None
        print(f"MissionController: '{mission.name}' {mission.status.value.lower()}, "
              f"{mission.duration}, {len(mission.detected_sites)} sites")
        return mission

    def end_mission_from_telemetry(self, interrupted: bool = False) -> Optional[Mission]:
        """End the mission with the simulator's own elapsed time, track and sites."""
        snap = self.simulator.snapshot
        return self.end_mission(snap.flight_time, snap.gps_track, snap.detected_sites,
                                interrupted=interrupted)

    def set_armed_state(self, armed: bool) -> bool:
        """Manual arm/disarm. Disarming during a mission is refused."""
        if self.state is LifecycleState.ACTIVE and not armed:
            print("MissionController: can't disarm during an active mission")
            return False
        self.simulator.set_armed(armed)
        return True

    def _new_mission_id(self, now: datetime) -> str:
        base = f"m-{int(now.timestamp() * 1000)}"
        existing = set(self.history.ids())
        candidate = base
        suffix = 1
        while candidate in existing:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate
