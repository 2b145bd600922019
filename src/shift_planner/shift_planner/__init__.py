"""Shift Planner package.

This package is organized by feature modules (schedules, pending, imports, auth, ...)
with a thin Flask JSON controller layer and service/repository layers underneath.
"""
