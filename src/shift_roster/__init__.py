"""
Shift Roster

A command-line employee scheduling tool that assigns pre-seeded shifts to
employees under a configurable daily-hours cap, persisting all records as
flat JSON files.
"""

__version__ = "1.0.0"
__author__ = "Shift Roster Team"
