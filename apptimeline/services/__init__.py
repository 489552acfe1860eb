"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .timeline_service import (
    AppointmentSourceProtocol,
    CurrentTimeTicker,
    TimelineService,
    system_clock,
)

__all__ = ["AppointmentSourceProtocol", "CurrentTimeTicker", "TimelineService", "system_clock"]
