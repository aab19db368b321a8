"""Configuration: SPICE and element-table paths, logging setup from environment."""

import logging
import os
import sys
from pathlib import Path

# Paths; env var overrides with sensible defaults.
DEFAULT_SPICE_PATH = '/var/www/SPICE/'
DEFAULT_ELEMENTS_PATH = str(Path(__file__).parent / 'data' / 'solar_eclipses.txt')

# Kernel names tried in order under SPICE_PATH when no explicit list is given.
DEFAULT_KERNELS = ('naif0012.tls', 'pck00011.tpc', 'de440s.bsp')


def get_spice_path() -> str:
    """Return SPICE kernel root directory (SPICE_PATH env var or default).

    Returns:
        Path string.
    """
    return os.environ.get('SPICE_PATH', DEFAULT_SPICE_PATH)


def get_elements_path() -> str:
    """Return the Besselian element table (ECLIPSE_ELEMENTS_PATH or bundled table).

    Returns:
        Path string.
    """
    path = os.environ.get('ECLIPSE_ELEMENTS_PATH', '').strip()
    return path or DEFAULT_ELEMENTS_PATH


def get_leapsecs_path() -> str:
    """Return path to a NAIF LSK leap seconds file for rms-julian.

    Prefers JULIAN_LEAPSECS, then a .tls under SPICE_PATH, then leapsecs.txt.

    Returns:
        Path string to LSK or leapsecs file.
    """
    path = os.environ.get('JULIAN_LEAPSECS', '').strip()
    if path:
        return path
    base = Path(get_spice_path())
    for name in ('naif0012.tls', 'naif0011.tls', 'naif0010.tls', 'leapseconds.tls'):
        p = base / name
        if p.exists():
            return str(p)
    return str(base / 'leapsecs.txt')


def configure_logging(verbose: bool = False) -> None:
    """Configure package logging (stderr, level from verbose or ECLIPSE_TOOLS_LOG).

    Parameters:
        verbose: True for DEBUG, otherwise WARNING unless the env var overrides.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = os.environ.get('ECLIPSE_TOOLS_LOG', '').upper()
    if env_level in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        level = getattr(logging, env_level)
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(name)s: %(message)s',
        stream=sys.stderr,
    )
    logging.getLogger('eclipse_tools').setLevel(level)
