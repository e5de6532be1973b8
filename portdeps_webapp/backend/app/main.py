"""FastAPI app: list ports and serve dependency closures and graphs for the frontend."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from portdeps import build_closure, depend_info, list_known_ports, load_catalog, OutputFormat
from portdeps.logging_setup import configure_logging

configure_logging()

app = FastAPI(
    title="portdeps API",
    description="Port dependency visualization backend",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/packages")
def get_packages() -> dict:
    """List all known ports (name -> path to CONTROL)."""
    paths = list_known_ports()
    return {"packages": {name: str(p) for name, p in paths.items()}}


@app.get("/api/closure/{package_name}")
def get_closure(package_name: str) -> dict:
    """Return the dependency closure of one port."""
    closure = build_closure(load_catalog(), [package_name])
    if package_name not in closure:
        raise HTTPException(status_code=404, detail=f"Port not found: {package_name}")
    return {"closure": closure}


@app.get("/api/graph")
def get_graph(
    format: OutputFormat = Query(OutputFormat.PLAIN),
    name: list[str] = Query(default=[]),
    features: bool | None = Query(None),
) -> dict:
    """Render the graph of the given ports (or all ports) in plain, dot or dgml format."""
    graph = depend_info(load_catalog(), name, fmt=format, include_features=features)
    return {"format": format.value, "graph": graph}
