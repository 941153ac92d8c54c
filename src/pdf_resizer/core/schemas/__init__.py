"""
Schemas Package

JSON schema definitions and validation utilities for export job files.
"""

from .validator import (
    validate_job,
    ValidationError,
    EXPORT_JOB_SCHEMA_VERSION,
)

__all__ = [
    "validate_job",
    "ValidationError",
    "EXPORT_JOB_SCHEMA_VERSION",
]
