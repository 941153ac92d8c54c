"""Core units, models and schemas shared across the package."""
