"""Temporal runtime: activities, workflows, schedules and the worker."""
