"""portdeps: show what a port (transitively) depends on, as text, DOT or DGML."""

from importlib.metadata import version, PackageNotFoundError

import structlog

from portdeps.api import (
    build_closure,
    depend_info,
    get_package_info,
    list_known_ports,
    load_catalog,
    OutputFormat,
)

__all__ = [
    "build_closure",
    "depend_info",
    "get_package_info",
    "list_known_ports",
    "load_catalog",
    "OutputFormat",
    "__version__",
]

if not structlog.is_configured():
    from portdeps.logging_setup import configure_library_defaults

    configure_library_defaults()

try:
    __version__ = version("portdeps")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
