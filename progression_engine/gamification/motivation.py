"""
Motivation Classifier

Maps today's completion ratio to one of five motivation states:

- no habits configured             -> NO_HABITS
- habits configured, none done     -> NOT_STARTED
- under half done                  -> LIGHT_DAY (carries the count)
- half or more, not all            -> PRODUCTIVE_DAY
- all done (or more than all)      -> PERFECT_DAY
"""

from progression_engine.models.motivation import MotivationKind, MotivationState


def classify(completed: int, total: int) -> MotivationState:
    """
    Classify a same-day completion ratio

    Defined for every pair of counts; over-completion (completed > total)
    is a perfect day, never an error.
    """
    if total <= 0:
        return MotivationState(MotivationKind.NO_HABITS)

    if completed <= 0:
        return MotivationState(MotivationKind.NOT_STARTED)

    ratio = completed / total
    if ratio < 0.5:
        return MotivationState(MotivationKind.LIGHT_DAY, habits_completed=completed)
    if ratio < 1.0:
        return MotivationState(MotivationKind.PRODUCTIVE_DAY)
    return MotivationState(MotivationKind.PERFECT_DAY)
