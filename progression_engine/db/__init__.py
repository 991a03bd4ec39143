"""Persistence seam for the progression service"""

from progression_engine.db.store import InMemoryProgressStore, ProgressStore

__all__ = ["InMemoryProgressStore", "ProgressStore"]
