"""Attendance time-accounting engine.

Organized by feature modules (attendance, corrections, settings, stats, ...)
with thin Flask controllers on top of service and repository layers.
"""
