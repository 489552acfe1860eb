"""
apptimeline - Appointment timeline layout engine.
"""

__version__ = "0.1.0"
