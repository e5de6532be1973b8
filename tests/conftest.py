"""Shared fixtures: a throwaway ports directory and quiet logging."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from portdeps.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    # Route structlog through stdlib logging so nothing lands on stdout
    configure_logging(verbose=False)


@pytest.fixture
def write_port(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes <tmp>/ports/<name>/CONTROL and returns the ports root."""
    root = tmp_path / "ports"
    root.mkdir(exist_ok=True)

    def _write(name: str, depends: str = "", *, extra: str = "", version: str = "1.0") -> Path:
        port_dir = root / name
        port_dir.mkdir(exist_ok=True)
        text = f"Source: {name}\nVersion: {version}\nDescription: {name} port\n"
        if depends:
            text += f"Build-Depends: {depends}\n"
        if extra:
            text += f"\n{extra}"
        (port_dir / "CONTROL").write_text(text)
        return root

    return _write
