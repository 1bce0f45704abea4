"""Helper modules for Habit Tracker integration.

- report_helpers: Shapes engine output into the report structures returned
  by the response-only services
"""
