"""Agent Lightning -- tabular Q-learning optimizer for content quality scores."""

__version__ = "1.0.0"
