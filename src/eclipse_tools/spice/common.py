"""Shared state for the SPICE layer: which kernels are already in the pool."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SpiceState:
    """Kernel pool bookkeeping.

    pool_loaded is set once the requested kernels are furnished; kernels
    lists the paths passed to cspyce.furnsh so repeated loads are skipped.
    """

    pool_loaded: bool = False
    kernels: list[str] = field(default_factory=list)

    def reset(self) -> None:
        """Forget loaded kernels (the cspyce pool itself is not cleared)."""
        self.pool_loaded = False
        self.kernels = []


# Module-level singleton
_state = SpiceState()


def get_state() -> SpiceState:
    """Return the global SpiceState instance."""
    return _state
