"""
Adapters layer - External data sources.
"""

from .json_source import JsonAppointmentSource

__all__ = ["JsonAppointmentSource"]
