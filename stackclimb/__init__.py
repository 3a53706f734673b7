"""Rules engine package for the stackclimb card game."""

__all__ = [
    "cards",
    "deck",
    "trick",
    "state",
    "rules",
    "rules_schema",
    "mechanics",
    "game",
    "service",
    "codec",
    "lobby",
]
