#!/usr/bin/env python3
"""
GCS Dashboard — Ground Control Station for the Mosquito-Control Drone

Wires the simulated vehicle to the operator's screen:

  1. TelemetrySimulator fabricates live telemetry once per tick
  2. MissionController runs the Idle -> Planning -> Active lifecycle and
     keeps the mission history
  3. GraphicsEngine draws the dashboard views with pygame

Simulator ticks arrive as pygame timer events and are dispatched from the
same event pump as keyboard and mouse input, so there is exactly one
thread touching telemetry and history.

Controls:
  M: Open mission setup (demo waypoints pre-filled)
  Mouse click on map: Add waypoint (mission setup only)
  C: Clear waypoints (mission setup only)
  ENTER: Launch mission (mission setup only)
  E: End mission
  I: End mission as interrupted
  A: Arm / disarm
  T: Toggle dark mode
  1-6: Switch view
  ESC: Close mission setup / exit

Headless:
  python gcs_dashboard.py --headless --ticks 60 --seed 7
"""

import argparse
import sys
from datetime import datetime
from typing import Optional, Sequence, Tuple

import numpy as np
import pygame

from core.analytics import header_clock
from core.mission_controller import InvalidPlanError, LifecycleState, MissionController
from core.navigation import offset_point
from core.simulator import TelemetrySimulator
from core.telemetry import GeoPoint, Mission, MissionPlan
from simulation.clock import ManualClock, PygameTimerClock
from simulation.graphics import GraphicsEngine

from gcs_config import (
    AUTO_START, DEFAULT_SEED, DEMO_PLAN_ALTITUDE_M, DEMO_PLAN_NAME, DEMO_PLAN_OFFSETS_M,
    DEMO_PLAN_SPEED_MPS, FRAME_RATE, PROJECT_SUMMARY, PROJECT_TITLE, VIEW_TITLES, VIEWS,
    WINDOW_SIZE, DashboardSettings,
)

VIEW_KEYS = [pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4, pygame.K_5, pygame.K_6]


def demo_waypoints(home: GeoPoint):
    return [offset_point(home, north, east) for north, east in DEMO_PLAN_OFFSETS_M]


def build_plan(home: GeoPoint, waypoints: Optional[Sequence[GeoPoint]] = None,
               name: str = DEMO_PLAN_NAME) -> MissionPlan:
    """Plan from explicit waypoints, or the demo survey around home."""
    if waypoints is None:
        waypoints = demo_waypoints(home)
    return MissionPlan.from_points(name, waypoints, DEMO_PLAN_ALTITUDE_M, DEMO_PLAN_SPEED_MPS)


def draft_plan(home: GeoPoint, waypoints: Sequence[GeoPoint]) -> MissionPlan:
    """Plan for the mission-setup draft. The untouched demo route keeps its
    name; anything the operator edited is logged as "Mission N"."""
    waypoints = list(waypoints)
    name = DEMO_PLAN_NAME if waypoints == demo_waypoints(home) else ""
    return build_plan(home, waypoints, name=name)


def run_headless(ticks: int = 60, seed: Optional[int] = DEFAULT_SEED,
                 tick_interval: Optional[float] = None) -> Mission:
    """Fly the demo plan for ``ticks`` ticks on a manual clock and log it."""
    clock = ManualClock()
    simulator = TelemetrySimulator(clock, rng=np.random.default_rng(seed), tick_interval=tick_interval)
    controller = MissionController(simulator)

    controller.launch(build_plan(simulator.home))
    clock.advance(ticks * simulator.tick_interval)
    snap = simulator.snapshot
    print(f"Headless run: {simulator.ticks} ticks, battery {snap.battery.percentage:.1f}%, "
          f"{snap.distance_from_home:.0f}m from home, mode {snap.flight_mode.value}")

    mission = controller.end_mission_from_telemetry()
    print(f"Logged {mission.id}: {mission.name}, {mission.duration}, "
          f"{len(mission.gps_track)} track points, {len(mission.detected_sites)} sites")
    return mission


class GCSDashboard:
    """
    Main dashboard window — the operator's ground station.

    Owns the pygame loop; every user intent is forwarded to the
    MissionController, every frame is drawn from its read side.
    """

    def __init__(self, window_size: Tuple[int, int] = WINDOW_SIZE,
                 seed: Optional[int] = DEFAULT_SEED,
                 tick_interval: Optional[float] = None,
                 dark_mode: bool = False):
        self.running = True
        self.clock = pygame.time.Clock()

        # ══════════════════════════════════════════════════════════════
        # SIMULATED VEHICLE + MISSION LIFECYCLE
        # ══════════════════════════════════════════════════════════════
        self.timer_clock = PygameTimerClock()
        self.simulator = TelemetrySimulator(self.timer_clock, rng=np.random.default_rng(seed),
                                            tick_interval=tick_interval)
        self.controller = MissionController(self.simulator)

        # ══════════════════════════════════════════════════════════════
        # PRESENTATION
        # ══════════════════════════════════════════════════════════════
        self.settings = DashboardSettings(dark_mode=dark_mode)
        self.graphics = GraphicsEngine(window_size)
        self.plan_message: Optional[str] = None

        if AUTO_START:
            self.controller.launch(build_plan(self.simulator.home))
            print("AUTO-START: Demo mission launched")

    # ══════════════════════════════════════════════════════════════════
    # MAIN LOOP
    # ══════════════════════════════════════════════════════════════════

    def run(self):
        print("Starting GCS Dashboard...")
        print("Controls: M=plan, ENTER=launch, E=end, A=arm, T=theme, 1-6=views, ESC=exit")

        while self.running:
            self.clock.tick(FRAME_RATE)
            self._handle_events()
            self._render()

        self._cleanup()

    def _handle_events(self):
        for event in pygame.event.get():
            if self.timer_clock.dispatch(event):
                continue

            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if self.controller.state is LifecycleState.PLANNING:
                    point = self.graphics.screen_to_world(event.pos)
                    if point is not None:
                        self.controller.add_draft_waypoint(point)
                        self.plan_message = None

            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key: int):
        planning = self.controller.state is LifecycleState.PLANNING

        if key == pygame.K_ESCAPE:
            if planning:
                self.controller.close_planning()
                self.plan_message = None
            else:
                self.running = False
        elif key == pygame.K_m:
            self.settings.navigate("dashboard")
            if self.controller.open_planning():
                for point in demo_waypoints(self.simulator.home):
                    self.controller.add_draft_waypoint(point)
        elif key == pygame.K_RETURN and planning:
            self._launch_draft()
        elif key == pygame.K_c and planning:
            self.controller.clear_draft()
        elif key == pygame.K_e:
            self.controller.end_mission_from_telemetry()
        elif key == pygame.K_i:
            self.controller.end_mission_from_telemetry(interrupted=True)
        elif key == pygame.K_a:
            self.controller.set_armed_state(not self.controller.telemetry.armed)
        elif key == pygame.K_t:
            self.settings.toggle_dark_mode()
        elif key in VIEW_KEYS:
            self.settings.navigate(VIEWS[VIEW_KEYS.index(key)])

    def _launch_draft(self):
        plan = draft_plan(self.simulator.home, self.controller.draft_waypoints)
        try:
            self.controller.launch(plan)
            self.plan_message = None
        except InvalidPlanError as e:
            self.plan_message = str(e)

    # ══════════════════════════════════════════════════════════════════
    # RENDERING
    # ══════════════════════════════════════════════════════════════════

    def _render(self):
        g = self.graphics
        snap = self.controller.telemetry
        missions = self.controller.missions
        view = self.settings.current_view

        g.clear(self.settings.dark_mode)
        g.draw_sidebar(VIEWS, VIEW_TITLES, view)
        time_text, date_text = header_clock(datetime.now())
        g.draw_header(self.settings.title, time_text, date_text, snap.battery.percentage)

        x0 = g.SIDEBAR_WIDTH + g.MARGIN
        width = self.graphics.window_size[0] - x0 - g.MARGIN

        if view == "dashboard":
            planning = self.controller.state is LifecycleState.PLANNING
            if planning:
                waypoints = self.controller.draft_waypoints
            elif self.controller.active_plan is not None:
                waypoints = self.controller.active_plan.waypoints
            else:
                waypoints = ()
            g.draw_overview(self.controller.overview())
            g.draw_track(snap, self.simulator.home, waypoints)
            g.draw_telemetry(snap, self.controller.is_mission_active)
            if planning:
                g.draw_planning_overlay(self.controller.draft_waypoints, self.plan_message)
            else:
                rect = pygame.Rect(x0, g.map_rect.bottom + 10, width,
                                   self.graphics.window_size[1] - g.map_rect.bottom - 20)
                g.draw_mission_list(missions, rect, limit=5)
        elif view == "analytics":
            g.draw_analytics(missions)
        elif view == "flightLogs":
            rect = pygame.Rect(x0, 80, width, self.graphics.window_size[1] - 100)
            g.draw_mission_list(missions, rect, title="Flight Logs")
        elif view == "settings":
            g.draw_settings(self.settings.dark_mode)
        elif view == "guide":
            g.draw_text_page("Guide", ["No content yet", "Guide content coming soon"])
        elif view == "aboutProject":
            g.draw_text_page(PROJECT_TITLE, PROJECT_SUMMARY)

        g.present()

    def _cleanup(self):
        self.simulator.stop()
        pygame.quit()
        print("Dashboard closed.")


# ══════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════════════

def positive_float(text: str) -> float:
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {text}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Mosquito-control drone ground control station")
    parser.add_argument("--headless", action="store_true",
                        help="fly the demo mission without a window and print the log entry")
    parser.add_argument("--ticks", type=int, default=60, help="ticks to simulate in headless mode")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="random seed for telemetry")
    parser.add_argument("--tick-interval", type=positive_float, default=None,
                        help="seconds between telemetry updates")
    parser.add_argument("--dark", action="store_true", help="start in dark mode")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point — dashboard window or headless run."""
    args = parse_args(argv)
    if args.headless:
        run_headless(args.ticks, args.seed, args.tick_interval)
        return

    try:
        pygame.init()
        dashboard = GCSDashboard(seed=args.seed, tick_interval=args.tick_interval, dark_mode=args.dark)
        dashboard.run()
    except KeyboardInterrupt:
        print("\nDashboard interrupted by user.")
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
