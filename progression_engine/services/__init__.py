"""
Service Layer Package

Business logic that runs the progression engine against a persistence
collaborator and hands plain values to the presentation layer.

Core Services:
- ProgressionService: profile loading, completions, achievements, home summary
"""

from progression_engine.services.progression_service import (
    CompletionResult,
    HomeSummary,
    ProgressionService,
)

__all__ = [
    "CompletionResult",
    "HomeSummary",
    "ProgressionService",
]
