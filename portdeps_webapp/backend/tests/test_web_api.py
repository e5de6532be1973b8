"""API tests for the portdeps backend."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


@pytest.fixture
def ports_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "ports"
    for name, control in {
        "app-core": "Source: app-core\nVersion: 1.0\nBuild-Depends: zlib\n",
        "zlib": "Source: zlib\nVersion: 1.2.11\n",
        "curl": "Source: curl\nVersion: 7.0\nBuild-Depends: zlib\n\nFeature: ssl\nBuild-Depends: openssl\n",
    }.items():
        (root / name).mkdir(parents=True)
        (root / name / "CONTROL").write_text(control)
    monkeypatch.setenv("PORTDEPS_PORTS_ROOT", str(root))
    return root


def test_get_packages(ports_root: Path) -> None:
    """GET /api/packages returns 200 and a packages dict."""
    response = client.get("/api/packages")
    assert response.status_code == 200
    data = response.json()
    assert set(data["packages"]) == {"app-core", "curl", "zlib"}


def test_get_closure(ports_root: Path) -> None:
    response = client.get("/api/closure/app-core")
    assert response.status_code == 200
    assert response.json()["closure"] == {"app-core": ["zlib"], "zlib": []}


def test_get_closure_not_found(ports_root: Path) -> None:
    """GET /api/closure/<unknown> returns 404."""
    response = client.get("/api/closure/nonexistent_port_xyz_123")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()


def test_get_graph_plain_filtered(ports_root: Path) -> None:
    response = client.get("/api/graph", params={"name": "app-core"})
    assert response.status_code == 200
    assert response.json()["graph"] == "app-core: zlib\nzlib: "


def test_get_graph_dot(ports_root: Path) -> None:
    response = client.get("/api/graph", params={"format": "dot"})
    assert response.status_code == 200
    graph = response.json()["graph"]
    assert "app_core -> zlib;" in graph
    assert 'empty [label="1 singletons..."]; }' in graph


def test_get_graph_dgml_includes_features_for_full_catalog(ports_root: Path) -> None:
    response = client.get("/api/graph", params={"format": "dgml"})
    graph = response.json()["graph"]
    assert '<Link Source="curl" Target="openssl" />' in graph


def test_get_graph_bad_format(ports_root: Path) -> None:
    response = client.get("/api/graph", params={"format": "svg"})
    assert response.status_code == 422
