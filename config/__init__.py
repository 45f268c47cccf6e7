"""Configuration for Workout Mapper."""
