"""SPICE kernel loading for the Sun/Moon ephemeris."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import cspyce

from eclipse_tools.config import DEFAULT_KERNELS, get_spice_path
from eclipse_tools.spice.common import get_state

logger = logging.getLogger(__name__)


def load_kernels(names: Iterable[str] | None = None) -> tuple[bool, str | None]:
    """Furnish leap-second, constants and planetary kernels from SPICE_PATH.

    Returns (True, None) if every kernel is in the pool, (False, reason) on failure.

    names: kernel file names relative to SPICE_PATH; DEFAULT_KERNELS when None.
    """
    state = get_state()
    base = Path(get_spice_path())
    if not base.exists():
        return (False, f'SPICE_PATH directory does not exist: {base}')
    if not base.is_dir():
        return (False, f'SPICE_PATH is not a directory: {base}')
    requested = list(names) if names is not None else list(DEFAULT_KERNELS)
    if not requested:
        return (False, 'No kernel names given')
    missing: list[str] = []
    for name in requested:
        kpath = base / name
        if str(kpath) in state.kernels:
            continue
        if not kpath.exists():
            logger.warning('Kernel not found: %s', kpath)
            missing.append(name)
            continue
        try:
            cspyce.furnsh(str(kpath))
            state.kernels.append(str(kpath))
        except Exception as e:
            logger.warning('Failed to load %s: %s', kpath, e)
            missing.append(name)
    if missing:
        return (
            False,
            f'Kernels not loaded from {base}: {", ".join(missing)}. '
            'Ensure SPICE_PATH points to a kernel tree with a leap-second kernel, '
            'a PCK and a planetary SPK.',
        )
    state.pool_loaded = True
    return (True, None)
