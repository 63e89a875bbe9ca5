"""
Job tracking exports.
"""

from app.jobs.registry import JobRegistry

__all__ = ["JobRegistry"]
