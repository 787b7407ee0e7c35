"""
Process-wide application context.

Holds the settings and the wall clock consulted by the scheduling core.
Constructed once at startup (API lifespan, Celery worker) via init_context();
tests swap in a frozen clock and call reset_context() afterwards.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from booking.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Local wall-clock time (naive, same frame as stored appointment times)"""
    return datetime.now()


@dataclass
class AppContext:
    """Shared state for every caller in the process"""
    settings: Settings = field(default_factory=get_settings)
    clock: Clock = system_clock

    def now(self) -> datetime:
        return self.clock()


_context: Optional[AppContext] = None


def init_context(
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None
) -> AppContext:
    """Build the process context. Replaces any existing one."""
    global _context
    _context = AppContext(
        settings=settings or get_settings(),
        clock=clock or system_clock,
    )
    logger.debug("Application context initialised")
    return _context


def get_context() -> AppContext:
    """Return the process context, initialising it with defaults if needed"""
    if _context is None:
        return init_context()
    return _context


def reset_context() -> None:
    """Drop the process context so the next get_context() starts fresh"""
    global _context
    _context = None
