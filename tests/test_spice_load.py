"""Tests for SPICE kernel loading behavior."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from eclipse_tools.spice.common import get_state
from eclipse_tools.spice.load import load_kernels


@pytest.fixture
def spice_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    """Kernel tree with the default kernels present and a clean pool."""
    root = tmp_path / 'spice'
    root.mkdir()
    for name in ('naif0012.tls', 'pck00011.tpc', 'de440s.bsp'):
        (root / name).touch()
    monkeypatch.setattr('eclipse_tools.spice.load.get_spice_path', lambda: str(root))
    get_state().reset()
    yield root
    get_state().reset()


def test_load_default_kernels(monkeypatch: pytest.MonkeyPatch, spice_dir: Path) -> None:
    """Default kernels are furnished once and the pool is marked loaded."""
    furnished: list[str] = []
    monkeypatch.setattr('cspyce.furnsh', furnished.append)

    ok, reason = load_kernels()

    assert ok is True
    assert reason is None
    assert [Path(p).name for p in furnished] == ['naif0012.tls', 'pck00011.tpc', 'de440s.bsp']
    assert get_state().pool_loaded

    assert load_kernels() == (True, None)
    assert len(furnished) == 3


def test_missing_kernel_reports_name(
    monkeypatch: pytest.MonkeyPatch, spice_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """A kernel absent from SPICE_PATH fails the load with its name in the reason."""
    monkeypatch.setattr('cspyce.furnsh', lambda path: None)

    ok, reason = load_kernels(['naif0012.tls', 'de430.bsp'])

    assert ok is False
    assert reason is not None and 'de430.bsp' in reason
    assert 'Kernel not found' in caplog.text
    assert not get_state().pool_loaded


def test_furnsh_failure(monkeypatch: pytest.MonkeyPatch, spice_dir: Path) -> None:
    """A cspyce error while furnishing is reported, not raised."""

    def _furnsh(path: str) -> None:
        raise RuntimeError('SPICE(BADFILE)')

    monkeypatch.setattr('cspyce.furnsh', _furnsh)

    ok, reason = load_kernels(['de440s.bsp'])

    assert ok is False
    assert reason is not None and 'de440s.bsp' in reason
    assert get_state().kernels == []


def test_empty_kernel_list(spice_dir: Path) -> None:
    """An explicit empty list is rejected."""
    assert load_kernels([]) == (False, 'No kernel names given')


def test_bad_spice_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """SPICE_PATH must be an existing directory."""
    missing = tmp_path / 'nowhere'
    monkeypatch.setattr('eclipse_tools.spice.load.get_spice_path', lambda: str(missing))
    ok, reason = load_kernels()
    assert ok is False
    assert reason is not None and 'does not exist' in reason

    a_file = tmp_path / 'file.txt'
    a_file.touch()
    monkeypatch.setattr('eclipse_tools.spice.load.get_spice_path', lambda: str(a_file))
    ok, reason = load_kernels()
    assert ok is False
    assert reason is not None and 'not a directory' in reason
