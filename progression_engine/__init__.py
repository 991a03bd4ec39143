"""
Progression & Motivation Engine

Turns a stream of daily habit completions into level/XP state, streak
continuity, achievement unlocks, weekly summaries and a day-keyed quote
rotation. The engine (progression_engine.gamification) is pure and
synchronous; progression_engine.services runs it against a store.
"""

__version__ = "1.0.0"
