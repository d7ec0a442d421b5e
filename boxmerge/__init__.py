"""
Boxmerge - Sliding/Merging Puzzle Engine

A deterministic engine for 2048-style puzzles on a 3D-rendered board.
The engine provides:
- Immutable grid snapshots
- Edge-first merge resolution
- Win / loss detection
- A phase state machine synchronised with an external animation layer
"""

__version__ = "0.1.0"
