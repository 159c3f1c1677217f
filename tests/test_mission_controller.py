import pytest

from core.mission_controller import (
    LIVE_LOCATION, InvalidPlanError, LifecycleState, MissionController, MissionError,
    format_mission_date, normalize_duration, validate_plan,
)
from core.mission_history import InMemoryMissionHistory
from core.telemetry import BreedingSiteInfo, GeoPoint, Mission, MissionPlan, MissionStatus, SiteType


def _plan(name="Test", waypoints=((0, 0), (0, 1)), altitude=50, speed=5):
    return MissionPlan.from_points(name, waypoints, altitude, speed)


def _record(mission_id):
    return Mission(mission_id, f"Mission {mission_id}", "Oct 1, 2025", "10 mins",
                   MissionStatus.COMPLETED, "Somewhere")


# ── Duration / date formatting ───────────────────────────────────────────

@pytest.mark.parametrize("text, expected", [
    ("0:15", "15 secs"),
    ("00:15", "15 secs"),
    ("2:05", "125 secs"),
    ("12:3", "723 secs"),
    ("1:02:03", "62 secs"),
    ("3:07xyz", "187 secs"),
])
def test_normalize_duration(text, expected):
    assert normalize_duration(text) == expected


@pytest.mark.parametrize("text", ["15", "", "ab:cd", ":15"])
def test_normalize_duration_rejects_malformed(text):
    with pytest.raises(ValueError):
        normalize_duration(text)


def test_format_mission_date(fixed_now):
    assert format_mission_date(fixed_now) == "Oct 19, 2026"


def test_validate_plan_lists_every_problem():
    problems = validate_plan(_plan(waypoints=(), altitude=0, speed=-1))
    assert len(problems) == 3
    assert validate_plan(_plan()) == []


# ── Planning ─────────────────────────────────────────────────────────────

def test_starts_idle(controller):
    assert controller.state is LifecycleState.IDLE
    assert controller.active_plan is None
    assert not controller.is_mission_active
    assert controller.missions == ()


def test_default_history_is_seeded(simulator):
    controller = MissionController(simulator)
    assert len(controller.missions) == 7
    assert controller.missions[0].id == "m12"


def test_open_and_close_planning(clock, controller):
    assert controller.open_planning() is True
    assert controller.state is LifecycleState.PLANNING
    assert clock.active_timers == 0

    controller.add_draft_waypoint(GeoPoint(1.0, 2.0))
    assert controller.close_planning() is True
    assert controller.state is LifecycleState.IDLE
    assert controller.draft_waypoints == []


def test_close_planning_when_idle_is_rejected(controller):
    assert controller.close_planning() is False
    assert controller.state is LifecycleState.IDLE


def test_draft_waypoints_only_while_planning(controller):
    assert controller.add_draft_waypoint(GeoPoint(0, 0)) is False
    controller.open_planning()
    assert controller.add_draft_waypoint(GeoPoint(0, 0)) is True
    controller.clear_draft()
    assert controller.draft_waypoints == []


# ── Launch ───────────────────────────────────────────────────────────────

def test_launch_starts_simulator(clock, simulator, controller):
    controller.open_planning()
    plan = _plan()
    assert controller.launch(plan) is True
    assert controller.state is LifecycleState.ACTIVE
    assert controller.active_plan is plan
    assert simulator.running
    assert clock.active_timers == 1
    assert controller.telemetry.armed is True
    assert controller.telemetry.gps_track == ()


def test_launch_from_idle_skips_planning(controller):
    assert controller.launch(_plan()) is True
    assert controller.is_mission_active


def test_launch_without_waypoints_stays_in_planning(clock, simulator, controller):
    controller.open_planning()
    with pytest.raises(InvalidPlanError) as excinfo:
        controller.launch(_plan(waypoints=()))

    assert isinstance(excinfo.value, MissionError)
    assert excinfo.value.problems == ["Mission plan needs at least one waypoint"]
    assert controller.state is LifecycleState.PLANNING
    assert controller.active_plan is None
    assert controller.missions == ()
    assert not simulator.running
    assert clock.active_timers == 0


@pytest.mark.parametrize("altitude, speed", [(0, 5), (50, 0), (-10, 5), (50, -2)])
def test_launch_rejects_non_positive_altitude_or_speed(controller, altitude, speed):
    with pytest.raises(InvalidPlanError):
        controller.launch(_plan(altitude=altitude, speed=speed))
    assert controller.state is LifecycleState.IDLE


def test_double_launch_is_rejected(clock, controller):
    controller.launch(_plan(name="First"))
    clock.advance(2)
    assert controller.launch(_plan(name="Second")) is False
    assert controller.active_plan.name == "First"
    assert clock.active_timers == 1
    assert len(controller.telemetry.gps_track) == 2


# ── End mission ──────────────────────────────────────────────────────────

def test_launch_tick_end_records_mission(clock, controller, fixed_now):
    controller.launch(_plan())
    clock.advance(3)
    snap = controller.telemetry

    mission = controller.end_mission("0:15", snap.gps_track, snap.detected_sites)

    assert controller.missions == (mission,)
    assert mission.duration == "15 secs"
    assert mission.status is MissionStatus.COMPLETED
    assert mission.name == "Test"
    assert mission.location == LIVE_LOCATION
    assert mission.date == "Oct 19, 2026"
    assert mission.id == f"m-{int(fixed_now.timestamp() * 1000)}"
    assert len(mission.gps_track) == 3


def test_end_mission_resets_to_idle(clock, simulator, controller):
    controller.launch(_plan())
    clock.advance(3)
    controller.end_mission_from_telemetry()

    assert controller.state is LifecycleState.IDLE
    assert controller.active_plan is None
    assert not simulator.running
    assert clock.active_timers == 0
    assert controller.telemetry.armed is False

    clock.advance(5)
    assert simulator.ticks == 3


def test_end_mission_prepends_to_history(simulator, fixed_now):
    history = InMemoryMissionHistory([_record("m1"), _record("m2")])
    controller = MissionController(simulator, history=history, now=lambda: fixed_now)
    controller.launch(_plan())
    new = controller.end_mission("0:15", [], [])

    assert [m.id for m in controller.missions] == [new.id, "m1", "m2"]


def test_end_mission_twice_records_once(clock, controller):
    controller.launch(_plan())
    clock.advance(2)
    first = controller.end_mission_from_telemetry()
    assert first is not None
    assert controller.end_mission("0:02", [], []) is None
    assert controller.missions == (first,)


def test_end_mission_while_idle_is_ignored(controller):
    assert controller.end_mission("0:15", [], []) is None
    assert controller.missions == ()


def test_unnamed_plan_gets_sequential_name(simulator, fixed_now):
    history = InMemoryMissionHistory([_record("m1"), _record("m2")])
    controller = MissionController(simulator, history=history, now=lambda: fixed_now)
    controller.launch(_plan(name=""))
    assert controller.end_mission("0:05", [], []).name == "Mission 3"


def test_track_and_sites_copied_verbatim(controller):
    track = [GeoPoint(1.0, 2.0), GeoPoint(1.1, 2.1)]
    sites = [BreedingSiteInfo(SiteType.OPEN, "Old Tires")]
    controller.launch(_plan())
    mission = controller.end_mission("1:00", track, sites)

    track.append(GeoPoint(9.9, 9.9))
    assert mission.gps_track == (GeoPoint(1.0, 2.0), GeoPoint(1.1, 2.1))
    assert mission.detected_sites == (BreedingSiteInfo(SiteType.OPEN, "Old Tires"),)
    assert mission.duration == "60 secs"


def test_end_mission_from_telemetry_uses_snapshot(clock, scripted_simulator, fixed_now):
    simulator = scripted_simulator(draws=[0.0])
    controller = MissionController(simulator, history=InMemoryMissionHistory(), now=lambda: fixed_now)
    controller.launch(_plan())
    clock.advance(4)
    mission = controller.end_mission_from_telemetry()

    assert mission.duration == "4 secs"
    assert len(mission.gps_track) == 4
    assert mission.detected_sites == (BreedingSiteInfo(SiteType.ENCLOSED, "Flower Pots"),)


def test_malformed_duration_falls_back_to_flight_time(clock, controller):
    controller.launch(_plan())
    clock.advance(3)
    mission = controller.end_mission("soon", [], [])
    assert mission.duration == "3 secs"


def test_interrupted_mission(controller):
    controller.launch(_plan())
    mission = controller.end_mission("0:30", [], [], interrupted=True)
    assert mission.status is MissionStatus.INTERRUPTED


def test_ids_unique_within_same_millisecond(controller):
    ids = set()
    for _ in range(3):
        controller.launch(_plan())
        ids.add(controller.end_mission("0:01", [], []).id)
    assert len(ids) == 3
    assert len(controller.missions) == 3


def test_new_mission_starts_with_empty_track(clock, controller):
    controller.launch(_plan())
    clock.advance(5)
    controller.end_mission_from_telemetry()

    controller.launch(_plan(name="Again"))
    assert controller.telemetry.gps_track == ()
    assert controller.telemetry.detected_sites == ()


def test_overview_reflects_history(controller):
    controller.launch(_plan())
    controller.end_mission("2:00", [], [])
    total = controller.overview()[0]
    assert total.id == "total-missions"
    assert total.value == "1"


# ── Arming ───────────────────────────────────────────────────────────────

def test_manual_arm_while_idle(clock, controller):
    assert controller.set_armed_state(True) is True
    assert controller.telemetry.armed is True
    assert controller.state is LifecycleState.IDLE
    assert clock.active_timers == 0
    assert controller.telemetry.gps_track == ()

    controller.set_armed_state(False)
    assert controller.telemetry.armed is False


def test_armed_for_whole_mission(clock, controller):
    armed = []
    controller.simulator.subscribe(lambda snap: armed.append(snap.armed))
    controller.launch(_plan())
    clock.advance(5)
    assert controller.set_armed_state(False) is False
    clock.advance(5)
    assert all(armed)
    assert len(armed) == 11


def test_launch_refused_while_simulator_already_running(clock, simulator, controller):
    simulator.start()
    clock.advance(2)
    controller.open_planning()

    assert controller.launch(_plan()) is False
    assert controller.state is LifecycleState.PLANNING
    assert controller.active_plan is None
    assert simulator.plan is None
    assert len(controller.telemetry.gps_track) == 2


def test_launch_leaves_state_alone_when_simulator_start_fails(simulator, controller, monkeypatch):
    def failing_schedule(interval_s, callback):
        raise RuntimeError("timer unavailable")

    monkeypatch.setattr(simulator.clock, "schedule", failing_schedule)
    controller.open_planning()

    with pytest.raises(RuntimeError):
        controller.launch(_plan())
    assert controller.state is LifecycleState.PLANNING
    assert controller.active_plan is None
    assert not simulator.running
    assert controller.telemetry.armed is False
