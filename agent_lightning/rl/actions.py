"""
Action space for the Agent Lightning optimizer.

The agent chooses between six symbolic optimization moves.  The set is
closed: nothing registers new actions at runtime, and the declaration
order below is the canonical order used for tie-breaking during greedy
selection and for iterating over Q-table rows.
"""

from __future__ import annotations

from enum import Enum


class OptimizationAction(str, Enum):
    """Optimization moves the agent may apply to a content artifact."""

    OPTIMIZE_META_TAGS = "optimizeMetaTags"
    ADJUST_KEYWORD_DENSITY = "adjustKeywordDensity"
    ADD_STRUCTURED_DATA = "addStructuredData"
    IMPROVE_CONTENT_STRUCTURE = "improveContentStructure"
    OPTIMIZE_PERFORMANCE = "optimizePerformance"
    ENHANCE_ACCESSIBILITY = "enhanceAccessibility"


# Canonical ordering -- first entry wins exact ties in greedy selection.
ACTIONS: tuple[OptimizationAction, ...] = tuple(OptimizationAction)


def parse_action(value: str | OptimizationAction) -> OptimizationAction:
    """Coerce an action tag into :class:`OptimizationAction`.

    Raises:
        ValueError: If *value* is not one of the six known tags.
    """
    if isinstance(value, OptimizationAction):
        return value
    try:
        return OptimizationAction(value)
    except ValueError:
        raise ValueError(f"Unknown optimization action: {value!r}") from None
