#!/usr/bin/env python3
"""
GCS DASHBOARD CONFIGURATION
===========================

Dashboard-level settings for the mosquito-control drone ground station.
Simulator tuning (tick rate, battery drain, detection odds) lives on
TelemetrySimulator itself; this module holds what the operator sees.

Views:
1. dashboard     overview cards, live telemetry, recent missions
2. analytics     status counts and breeding-site breakdown
3. flightLogs    full mission history
4. settings      dark mode
5. guide         placeholder
6. aboutProject  project summary
"""

from dataclasses import dataclass

# Window / loop
WINDOW_SIZE = (1280, 800)
FRAME_RATE = 30

# AUTO-RUN CONFIGURATION
AUTO_START = False      # launch the demo plan as soon as the dashboard opens
DEFAULT_SEED = None     # None = fresh entropy every run

# Demo mission used by the planning overlay when no waypoints are clicked
DEMO_PLAN_NAME = "Sampaloc Survey"
DEMO_PLAN_ALTITUDE_M = 25.0
DEMO_PLAN_SPEED_MPS = 5.0
DEMO_PLAN_OFFSETS_M = [(40.0, 0.0), (40.0, 40.0), (80.0, 40.0), (80.0, 0.0)]  # (north, east) of home

VIEWS = ["dashboard", "analytics", "flightLogs", "settings", "guide", "aboutProject"]

VIEW_TITLES = {
    "dashboard": "Dashboard",
    "analytics": "Analytics",
    "flightLogs": "Flight Logs",
    "settings": "Settings",
    "guide": "Guide",
    "aboutProject": "About Project",
}

PROJECT_TITLE = ("Smart Mosquito Control Drone: AI-Powered Larval Detection "
                 "and Automated Larvicide Deployment")
PROJECT_SUMMARY = [
    "Semi-autonomous DJI F450 quadcopter for dengue vector control in Sta. Mesa, Manila.",
    "YOLOv8 on a Raspberry Pi 4 detects breeding sites and larvae from an RGB camera.",
    "LIDAR estimates site volume for Bti larvicide dosing; GPS geotags every detection.",
    "The GCS logs detection accuracy, response time and area coverage per mission.",
]


@dataclass
class DashboardSettings:
    """UI state shared with every view: theme and current page."""
    dark_mode: bool = False
    current_view: str = "dashboard"

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode

    def navigate(self, view: str) -> bool:
        if view not in VIEW_TITLES:
            print(f"Unknown view: {view}")
            return False
        self.current_view = view
        return True

    @property
    def title(self) -> str:
        return VIEW_TITLES[self.current_view]
