"""Synchronization of store, markers and snapshot."""

from .orchestrator import WorkoutOrchestrator

__all__ = ['WorkoutOrchestrator']
