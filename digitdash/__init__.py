"""
Digit Dash - Roguelike Number Puzzle Engine

A swap puzzle where the player rearranges the shuffled digits of an
identifier back into order, while power-ups and obstacles bend the rules.
The engine provides:
- Immutable puzzle state
- A reducer driven by discrete commands and clock ticks
- Randomized power-ups and time-bounded obstacles
- Session management and an HTTP API for presentation layers
"""

__version__ = "0.1.0"
