"""
Engine faults.

Faults signal that a collaborator broke the engine's contract. They are
never game states: the operation that raised is aborted and the grid
snapshot the caller holds is left untouched.
"""

from __future__ import annotations


class EngineFault(Exception):
    """Base class for all engine faults."""
    error_code = "ENGINE_FAULT"


class InvalidDirectionError(EngineFault, ValueError):
    """Direction vector with zero or two nonzero axes."""
    error_code = "INVALID_DIRECTION"


class ProtocolError(EngineFault):
    """A signal or action delivered in a phase that does not expect it."""
    error_code = "PROTOCOL_FAULT"


class OutOfRangeError(EngineFault, IndexError):
    """Grid position or line index outside [0, size)."""
    error_code = "OUT_OF_RANGE"
