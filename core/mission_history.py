"""
Mission history store.

The dashboard only ever needs two operations on the history: prepend a
finished mission and list everything most-recent-first. ``MissionHistory``
is that interface; ``InMemoryMissionHistory`` keeps the list for the life
of the process and is seeded with the mock missions below.
"""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from core.telemetry import BreedingSiteInfo, GeoPoint, Mission, MissionStatus, SiteType


class MissionHistory(ABC):
    """
    Storage interface for finalized missions (most-recent-first).

    Implement this for a persistent store; the controller only needs
    prepend and list.
    """

    @abstractmethod
    def prepend(self, mission: Mission):
        """Insert a finished mission at the front. Ids must be unique."""
        pass

    @abstractmethod
    def list(self) -> Tuple[Mission, ...]:
        """Every mission, most recent first, as an immutable snapshot."""
        pass

    def __len__(self) -> int:
        return len(self.list())

    def ids(self) -> List[str]:
        return [m.id for m in self.list()]


class InMemoryMissionHistory(MissionHistory):
    """List-backed history. A lock keeps prepend and list atomic."""

    def __init__(self, missions: Optional[Iterable[Mission]] = None):
        self._lock = threading.Lock()
        self._missions: List[Mission] = list(missions or [])

    def prepend(self, mission: Mission):
        with self._lock:
            if any(m.id == mission.id for m in self._missions):
                raise ValueError(f"Duplicate mission id: {mission.id}")
            self._missions.insert(0, mission)

    def list(self) -> Tuple[Mission, ...]:
        with self._lock:
            return tuple(self._missions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._missions)


# ── Seed data ───────────────────────────────────────────────────────────

SEED_LOCATION = "428 Sampaloc"


def _track(*points) -> Tuple[GeoPoint, ...]:
    return tuple(GeoPoint(lat, lon) for lat, lon in points)


def seed_missions() -> List[Mission]:
    """Mock missions shown on a fresh dashboard, most recent first."""
    completed = MissionStatus.COMPLETED
    interrupted = MissionStatus.INTERRUPTED
    return [
        Mission("m12", "Mission 12", "Oct 9, 2025", "22 mins", completed, SEED_LOCATION,
                gps_track=_track((34.0522, -118.2437), (34.0525, -118.2440), (34.0528, -118.2435)),
                detected_sites=(BreedingSiteInfo(SiteType.OPEN, "Old Tires"),)),
        Mission("m11", "Mission 11", "Oct 9, 2025", "30 mins", interrupted, SEED_LOCATION),
        Mission("m10", "Mission 10", "Oct 8, 2025", "27 mins", completed, SEED_LOCATION,
                gps_track=_track((34.0532, -118.2427), (34.0535, -118.2430), (34.0538, -118.2425)),
                detected_sites=(BreedingSiteInfo(SiteType.ENCLOSED, "Flower Pots"),
                                BreedingSiteInfo(SiteType.OPEN, "Stagnant Puddle"))),
        Mission("m09", "Mission 9", "Oct 6, 2025", "24 mins", completed, SEED_LOCATION),
        Mission("m08", "Mission 8", "Oct 4, 2025", "31 mins", completed, SEED_LOCATION),
        Mission("m07", "Mission 7", "Oct 4, 2025", "19 mins", interrupted, SEED_LOCATION),
        Mission("m06", "Mission 6", "Oct 3, 2025", "22 mins", completed, SEED_LOCATION),
    ]
