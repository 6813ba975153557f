"""
State model for the Agent Lightning optimizer.

A :class:`ScoreState` summarises how well a content artifact is optimised
along four axes -- classic SEO, AI-assistant SEO, generative-engine
optimisation (GEO) and AI-overview optimisation (AIO).  Each score is an
integer in ``[0, 100]``.

For learning, states are coarsened into a :func:`state_key`: every score
is bucketed by integer division by 10 (11 buckets, ``0..10``) and the
buckets are joined with ``":"``.  Two states with the same key are the
same state as far as the Q-table is concerned.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

MIN_SCORE = 0
MAX_SCORE = 100
BUCKET_SIZE = 10
TERMINAL_SCORE = 80
KEY_SEPARATOR = ":"

# Persisted field name -> dataclass attribute
_FIELD_ALIASES: dict[str, str] = {
    "seo": "seo",
    "aiSeo": "ai_seo",
    "geo": "geo",
    "aio": "aio",
}


@dataclass(frozen=True)
class ScoreState:
    """Immutable snapshot of the four optimisation scores."""

    seo: int = 0
    ai_seo: int = 0
    geo: int = 0
    aio: int = 0

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if not MIN_SCORE <= value <= MAX_SCORE:
                raise ValueError(
                    f"{name} must be within [{MIN_SCORE}, {MAX_SCORE}], got {value}"
                )

    def to_dict(self) -> dict[str, int]:
        """Return the state using the camelCase names of the stored format."""
        return {alias: getattr(self, attr) for alias, attr in _FIELD_ALIASES.items()}


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def bucket(score: int) -> int:
    return score // BUCKET_SIZE


def state_key(state: ScoreState) -> str:
    """Discretise *state* into the string key used by the Q-table."""
    return KEY_SEPARATOR.join(
        str(bucket(score))
        for score in (state.seo, state.ai_seo, state.geo, state.aio)
    )


def initial_state() -> ScoreState:
    """Every episode starts from all-zero scores."""
    return ScoreState()


def is_terminal(state: ScoreState) -> bool:
    """True once every score has reached :data:`TERMINAL_SCORE`."""
    return (
        state.seo >= TERMINAL_SCORE
        and state.ai_seo >= TERMINAL_SCORE
        and state.geo >= TERMINAL_SCORE
        and state.aio >= TERMINAL_SCORE
    )
