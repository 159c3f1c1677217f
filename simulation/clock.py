"""
Tick clocks for the telemetry simulator.

The simulator never sleeps or spawns threads. It asks a clock for a
periodic timer and gets back a handle; cancelling the handle guarantees
that no further ticks are delivered, even ones already sitting in the
event queue.

  PygameTimerClock  pygame.time.set_timer custom events, fired from the
                    dashboard's own event pump (one thread, one loop)
  ManualClock       simulated time advanced explicitly (headless runs, tests)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import pygame


@dataclass
class TimerHandle:
    """Opaque handle returned by ``TickClock.schedule``."""
    id: int
    interval_s: float
    callback: Callable[[], None]


class TickClock(ABC):
    """Interface shared by every clock the simulator can run on."""

    @abstractmethod
    def schedule(self, interval_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Call ``callback`` every ``interval_s`` seconds until cancelled."""
        pass

    @abstractmethod
    def cancel(self, handle: Optional[TimerHandle]):
        """Stop the timer; no further callbacks, even already-queued ones."""
        pass

    @property
    @abstractmethod
    def active_timers(self) -> int:
        pass


class ManualClock(TickClock):
    """Clock driven by explicit ``advance`` calls."""

    def __init__(self):
        self.now = 0.0
        self._timers: Dict[int, TimerHandle] = {}
        self._due: Dict[int, float] = {}
        self._next_id = 1

    def schedule(self, interval_s: float, callback: Callable[[], None]) -> TimerHandle:
        if interval_s <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval_s}")
        handle = TimerHandle(id=self._next_id, interval_s=interval_s, callback=callback)
        self._next_id += 1
        self._timers[handle.id] = handle
        self._due[handle.id] = self.now + interval_s
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None:
            return
        self._timers.pop(handle.id, None)
        self._due.pop(handle.id, None)

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def advance(self, seconds: float) -> int:
        """Move simulated time forward, firing every timer that falls due.

        Returns the number of callbacks fired."""
        target = self.now + seconds
        fired = 0
        while self._due:
            timer_id = min(self._due, key=self._due.get)
            due = self._due[timer_id]
            if due > target + 1e-9:
                break
            self.now = due
            handle = self._timers[timer_id]
            self._due[timer_id] = due + handle.interval_s
            handle.callback()
            fired += 1
        self.now = target
        return fired


class PygameTimerClock(TickClock):
    """Periodic timers posted as pygame custom events.

    The host loop must hand every event to ``dispatch``."""

    def __init__(self):
        self._timers: Dict[int, TimerHandle] = {}

    def schedule(self, interval_s: float, callback: Callable[[], None]) -> TimerHandle:
        event_type = pygame.event.custom_type()
        millis = max(1, int(round(interval_s * 1000)))
        pygame.time.set_timer(event_type, millis)
        handle = TimerHandle(id=event_type, interval_s=interval_s, callback=callback)
        self._timers[event_type] = handle
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None or handle.id not in self._timers:
            return
        pygame.time.set_timer(handle.id, 0)
        del self._timers[handle.id]

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def dispatch(self, event) -> bool:
        """Run the callback for a timer event. Returns True if consumed."""
        handle = self._timers.get(event.type)
        if handle is None:
            return False
        handle.callback()
        return True
