"""
Graphics Engine for the GCS Dashboard
Renders the dashboard views with pygame: header, overview cards, live
telemetry, ground-track map, mission log, analytics and the planning overlay.
Reads snapshots and mission tuples only; never changes controller state.
"""

import math
from typing import Dict, Optional, Sequence, Tuple

import pygame

from core.analytics import OverviewStat, site_breakdown, site_label_counts, status_counts
from core.navigation import local_offset_m, offset_point
from core.telemetry import GeoPoint, Mission, MissionStatus, SiteType, TelemetrySnapshot


class Colors:
    """Color constants for visualization."""
    BLACK = (0, 0, 0)
    WHITE = (255, 255, 255)
    RED = (220, 60, 60)
    GREEN = (40, 170, 90)
    BLUE = (50, 110, 230)
    YELLOW = (240, 200, 40)
    ORANGE = (255, 150, 40)
    GRAY = (128, 128, 128)

    # Detection colors
    OPEN_SITE = (255, 120, 60)
    ENCLOSED_SITE = (160, 80, 220)

    # Mission status colors
    STATUS = {
        MissionStatus.COMPLETED: GREEN,
        MissionStatus.INTERRUPTED: RED,
        MissionStatus.IN_PROGRESS: BLUE,
    }


# Light / dark palettes keyed by role
PALETTES: Dict[bool, Dict[str, Tuple[int, int, int]]] = {
    False: {
        "background": (243, 244, 246),
        "panel": (255, 255, 255),
        "sidebar": (30, 58, 95),
        "text": (31, 41, 55),
        "muted": (107, 114, 128),
        "border": (209, 213, 219),
        "map": (232, 240, 232),
    },
    True: {
        "background": (17, 24, 39),
        "panel": (31, 41, 55),
        "sidebar": (10, 15, 28),
        "text": (243, 244, 246),
        "muted": (156, 163, 175),
        "border": (55, 65, 81),
        "map": (26, 46, 40),
    },
}


class GraphicsEngine:
    """
    Dashboard renderer. Layout is fixed: sidebar on the left, header on
    top, and a content area that each view fills in its own way.
    """

    SIDEBAR_WIDTH = 180
    MARGIN = 20

    def __init__(self, window_size: Tuple[int, int]):
        """Initialize graphics engine (pygame.init() must already have run)."""
        self.window_size = window_size
        try:
            self.screen = pygame.display.set_mode(window_size)
            pygame.display.set_caption("Mosquito Control Drone GCS")
            print(f"✅ Graphics engine initialized: {window_size[0]}x{window_size[1]}")
        except Exception as e:
            print(f"❌ Failed to create display: {e}")
            raise

        self.font_small = pygame.font.Font(None, 18)
        self.font_medium = pygame.font.Font(None, 24)
        self.font_large = pygame.font.Font(None, 34)

        self.palette = PALETTES[False]
        self.frame_count = 0

        # Ground-track map: centred on home, fixed pixels per metre
        self.map_rect = pygame.Rect(self.SIDEBAR_WIDTH + self.MARGIN, 190, 520, 420)
        self.map_home = GeoPoint(0.0, 0.0)
        self.scale = 2.5

    # ── Frame ────────────────────────────────────────────────────────────

    def clear(self, dark_mode: bool):
        self.palette = PALETTES[dark_mode]
        self.screen.fill(self.palette["background"])
        self.frame_count += 1

    def present(self):
        pygame.display.flip()

    def _text(self, text: str, pos: Tuple[int, int], font=None, color=None):
        font = font or self.font_small
        surface = font.render(text, True, color or self.palette["text"])
        self.screen.blit(surface, pos)
        return surface.get_height()

    def _panel(self, rect: pygame.Rect, title: Optional[str] = None) -> int:
        """Draw a panel box; returns the y where content starts."""
        pygame.draw.rect(self.screen, self.palette["panel"], rect, border_radius=8)
        pygame.draw.rect(self.screen, self.palette["border"], rect, 1, border_radius=8)
        if title:
            self._text(title, (rect.x + 12, rect.y + 10), self.font_medium)
            return rect.y + 40
        return rect.y + 10

    # ── Chrome ───────────────────────────────────────────────────────────

    def draw_sidebar(self, views: Sequence[str], titles: Dict[str, str], current: str):
        rect = pygame.Rect(0, 0, self.SIDEBAR_WIDTH, self.window_size[1])
        pygame.draw.rect(self.screen, self.palette["sidebar"], rect)
        self._text("GCS", (20, 20), self.font_large, Colors.WHITE)
        y = 80
        for i, view in enumerate(views):
            if view == current:
                pygame.draw.rect(self.screen, Colors.BLUE, (10, y - 6, self.SIDEBAR_WIDTH - 20, 28),
                                 border_radius=6)
            self._text(f"{i + 1}  {titles[view]}", (20, y), self.font_medium, Colors.WHITE)
            y += 40
        self._text("M plan  E end  I interrupt", (12, self.window_size[1] - 60), color=Colors.WHITE)
        self._text("A arm  T theme  ESC exit", (12, self.window_size[1] - 40), color=Colors.WHITE)

    def draw_header(self, title: str, time_text: str, date_text: str, battery_pct: float):
        x = self.SIDEBAR_WIDTH + self.MARGIN
        self._text(title, (x, 24), self.font_large)
        right = self.window_size[0] - self.MARGIN

        # Battery gauge
        bar_w, bar_h = 90, 16
        bar_x = right - bar_w
        pygame.draw.rect(self.screen, self.palette["border"], (bar_x, 28, bar_w, bar_h), border_radius=3)
        fill_w = int(bar_w * max(0.0, min(100.0, battery_pct)) / 100.0)
        color = Colors.GREEN if battery_pct > 50 else Colors.YELLOW if battery_pct > 20 else Colors.RED
        pygame.draw.rect(self.screen, color, (bar_x, 28, fill_w, bar_h), border_radius=3)
        self._text(f"{battery_pct:.0f}%", (bar_x - 45, 28), self.font_medium)

        self._text(time_text, (bar_x - 260, 20), self.font_medium)
        self._text(date_text, (bar_x - 260, 42), color=self.palette["muted"])

    # ── Dashboard view ───────────────────────────────────────────────────

    def draw_overview(self, stats: Sequence[OverviewStat]):
        x0 = self.SIDEBAR_WIDTH + self.MARGIN
        width = self.window_size[0] - x0 - self.MARGIN
        card_w = (width - self.MARGIN * (len(stats) - 1)) // max(1, len(stats))
        for i, stat in enumerate(stats):
            rect = pygame.Rect(x0 + i * (card_w + self.MARGIN), 80, card_w, 90)
            self._panel(rect)
            self._text(stat.label, (rect.x + 12, rect.y + 12), color=self.palette["muted"])
            self._text(stat.value, (rect.x + 12, rect.y + 34), self.font_large)
            self._text(stat.subtext, (rect.x + 12, rect.y + 66), color=self.palette["muted"])

    def draw_telemetry(self, snap: TelemetrySnapshot, mission_active: bool):
        x0 = self.map_rect.right + self.MARGIN
        rect = pygame.Rect(x0, self.map_rect.y, self.window_size[0] - x0 - self.MARGIN, self.map_rect.height)
        y = self._panel(rect, "Live Telemetry" if mission_active else "Telemetry (idle)")

        rows = [
            ("Position", f"{snap.gps.lat:.5f}, {snap.gps.lon:.5f}"),
            ("Altitude", f"{snap.altitude:.1f} m"),
            ("Ground speed", f"{snap.speed:.1f} m/s"),
            ("Vertical speed", f"{snap.vertical_speed:+.1f} m/s"),
            ("Roll / Pitch", f"{snap.roll:+.1f}° / {snap.pitch:+.1f}°"),
            ("Heading", f"{snap.heading:.0f}°"),
            ("Signal", f"{snap.signal_strength}%"),
            ("Battery", f"{snap.battery.percentage:.1f}% ({snap.battery.voltage:.2f} V)"),
            ("Satellites", str(snap.satellites)),
            ("Flight time", snap.flight_time),
            ("From home", f"{snap.distance_from_home:.0f} m"),
            ("Mode", snap.flight_mode.value),
            ("Armed", "ARMED" if snap.armed else "Disarmed"),
            ("Sites found", str(len(snap.detected_sites))),
        ]
        for label, value in rows:
            self._text(label, (rect.x + 12, y), color=self.palette["muted"])
            color = Colors.RED if label == "Armed" and snap.armed else None
            self._text(value, (rect.x + 150, y), color=color)
            y += 24

        if snap.current_breeding_site is not None:
            site = snap.current_breeding_site
            banner = pygame.Rect(rect.x + 10, rect.bottom - 40, rect.width - 20, 30)
            pygame.draw.rect(self.screen, self._site_color(site.type), banner, border_radius=6)
            self._text(f"Breeding site detected: {site.to_text()}", (banner.x + 10, banner.y + 8),
                       color=Colors.WHITE)

    def draw_track(self, snap: TelemetrySnapshot, home: GeoPoint,
                   waypoints: Sequence[GeoPoint] = ()):
        """Ground track, planned waypoints, detections and the vehicle."""
        self.map_home = home
        pygame.draw.rect(self.screen, self.palette["map"], self.map_rect, border_radius=8)
        pygame.draw.rect(self.screen, self.palette["border"], self.map_rect, 1, border_radius=8)
        clip = self.screen.get_clip()
        self.screen.set_clip(self.map_rect)

        # Home marker
        hx, hy = self._world_to_screen(home)
        pygame.draw.rect(self.screen, Colors.BLUE, (hx - 5, hy - 5, 10, 10), 2)

        # Planned route
        if waypoints:
            pts = [self._world_to_screen(w) for w in waypoints]
            if len(pts) > 1:
                pygame.draw.lines(self.screen, Colors.GRAY, False, pts, 1)
            for i, p in enumerate(pts):
                pygame.draw.circle(self.screen, Colors.YELLOW, p, 6)
                self._text(str(i + 1), (p[0] + 8, p[1] - 8), color=self.palette["text"])

        # Flown track
        if len(snap.gps_track) > 1:
            pts = [self._world_to_screen(p) for p in snap.gps_track]
            pygame.draw.lines(self.screen, Colors.GREEN, False, pts, 2)

        # Vehicle with heading tick
        vx, vy = self._world_to_screen(snap.gps)
        heading = math.radians(snap.heading)
        tip = (int(vx + 14 * math.sin(heading)), int(vy - 14 * math.cos(heading)))
        pygame.draw.circle(self.screen, Colors.RED if snap.armed else Colors.GRAY, (vx, vy), 7)
        pygame.draw.line(self.screen, Colors.BLACK, (vx, vy), tip, 2)

        # Ring the vehicle on the tick a breeding site is detected
        if snap.current_breeding_site is not None:
            color = self._site_color(snap.current_breeding_site.type)
            pygame.draw.circle(self.screen, color, (vx, vy), 16, 3)

        self.screen.set_clip(clip)

    def draw_mission_list(self, missions: Sequence[Mission], rect: pygame.Rect,
                          title: str = "Recent Missions", limit: Optional[int] = None):
        y = self._panel(rect, title)
        columns = [0, 150, 280, 380, 500]
        headers = ["Mission", "Date", "Duration", "Status", "Location"]
        for cx, header in zip(columns, headers):
            self._text(header, (rect.x + 12 + cx, y), color=self.palette["muted"])
        y += 22
        shown = missions if limit is None else missions[:limit]
        for m in shown:
            if y > rect.bottom - 20:
                break
            values = [m.name, m.date, m.duration, m.status.value, m.location]
            for cx, value in zip(columns, values):
                color = Colors.STATUS[m.status] if value == m.status.value else None
                self._text(value, (rect.x + 12 + cx, y), color=color)
            sites = len(m.detected_sites or ())
            if sites:
                self._text(f"{sites} site{'s' if sites != 1 else ''}", (rect.x + 12 + 650, y),
                           color=Colors.OPEN_SITE)
            y += 22

    # ── Other views ──────────────────────────────────────────────────────

    def draw_analytics(self, missions: Sequence[Mission]):
        x0 = self.SIDEBAR_WIDTH + self.MARGIN
        half = (self.window_size[0] - x0 - 3 * self.MARGIN) // 2

        # Status bars
        rect = pygame.Rect(x0, 80, half, 300)
        y = self._panel(rect, "Mission Outcomes")
        counts = status_counts(missions)
        total = max(1, len(missions))
        for status, count in counts.items():
            self._text(f"{status.value}: {count}", (rect.x + 12, y))
            bar_w = int((rect.width - 200) * count / total)
            pygame.draw.rect(self.screen, Colors.STATUS[status], (rect.x + 170, y, bar_w, 14))
            y += 30

        # Site breakdown
        rect = pygame.Rect(x0 + half + self.MARGIN, 80, half, 300)
        y = self._panel(rect, "Breeding Sites")
        for site_type, count in site_breakdown(missions).items():
            pygame.draw.circle(self.screen, self._site_color(site_type), (rect.x + 20, y + 7), 6)
            self._text(f"{site_type.value}: {count}", (rect.x + 34, y))
            y += 26
        y += 10
        for label, count in site_label_counts(missions)[:6]:
            self._text(f"{label}", (rect.x + 12, y), color=self.palette["muted"])
            self._text(str(count), (rect.right - 40, y))
            y += 22

    def draw_settings(self, dark_mode: bool):
        x0 = self.SIDEBAR_WIDTH + self.MARGIN
        rect = pygame.Rect(x0, 80, 500, 120)
        y = self._panel(rect, "Appearance")
        state = "On" if dark_mode else "Off"
        self._text(f"Dark mode: {state}   (press T to toggle)", (rect.x + 12, y))

    def draw_text_page(self, title: str, lines: Sequence[str]):
        x0 = self.SIDEBAR_WIDTH + self.MARGIN
        rect = pygame.Rect(x0, 80, self.window_size[0] - x0 - self.MARGIN, 60 + 28 * max(1, len(lines)))
        y = self._panel(rect, title)
        for line in lines:
            self._text(line, (rect.x + 12, y))
            y += 28

    def draw_planning_overlay(self, draft: Sequence[GeoPoint], message: Optional[str]):
        rect = pygame.Rect(self.map_rect.x, self.map_rect.bottom + 10, self.map_rect.width, 60)
        y = self._panel(rect)
        self._text(f"Mission setup: {len(draft)} waypoint(s). Click map to add, "
                   f"C clear, ENTER launch, ESC cancel", (rect.x + 12, y), color=self.palette["text"])
        if message:
            self._text(message, (rect.x + 12, y + 22), color=Colors.RED)

    # ── Coordinates ──────────────────────────────────────────────────────

    def _world_to_screen(self, point: GeoPoint) -> Tuple[int, int]:
        """Convert a geographic point to map-panel pixels (north up)."""
        north, east = local_offset_m(self.map_home, point)
        if not (math.isfinite(north) and math.isfinite(east)):
            return self.map_rect.center
        screen_x = int(self.map_rect.centerx + east * self.scale)
        screen_y = int(self.map_rect.centery - north * self.scale)
        # Clamp to reasonable screen bounds
        screen_x = max(-1000, min(4000, screen_x))
        screen_y = max(-1000, min(4000, screen_y))
        return (screen_x, screen_y)

    def screen_to_world(self, screen_pos: Tuple[int, int]) -> Optional[GeoPoint]:
        """Map-panel pixel -> geographic point, or None outside the map."""
        if not self.map_rect.collidepoint(screen_pos):
            return None
        east = (screen_pos[0] - self.map_rect.centerx) / self.scale
        north = (self.map_rect.centery - screen_pos[1]) / self.scale
        return offset_point(self.map_home, north, east)

    def _site_color(self, site_type: SiteType) -> Tuple[int, int, int]:
        return Colors.OPEN_SITE if site_type is SiteType.OPEN else Colors.ENCLOSED_SITE
