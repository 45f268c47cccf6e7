"""Workout list analysis."""

from .workout_summary import sort_workouts, summarize, workouts_to_frame

__all__ = ['sort_workouts', 'summarize', 'workouts_to_frame']
