"""Command-line interface for portdeps: list ports, show dependency info and graphs."""

from __future__ import annotations

import argparse
import json
import shutil
import subprocess
import sys
from pathlib import Path

import structlog

from portdeps.api import depend_info
from portdeps.core.finder import list_port_paths, load_all_ports, resolve_ports_root
from portdeps.core.render import OutputFormat, select_format
from portdeps.logging_setup import configure_logging

log = structlog.get_logger(__name__)


def _ports_root_or_error(args: argparse.Namespace) -> Path | None:
    """Resolve the ports root from --ports or the environment; report if missing."""
    root = resolve_ports_root(getattr(args, "ports", None))
    if root is None:
        print(
            "Ports directory not found. Use --ports PATH or set PORTDEPS_PORTS_ROOT / VCPKG_ROOT.",
            file=sys.stderr,
        )
    return root


def _check_graphviz() -> bool:
    """Check if Graphviz (dot) is available."""
    return shutil.which("dot") is not None


def _render_dot(dot_content: str, output_path: Path, format: str) -> bool:
    """Render DOT content to an image file using Graphviz."""
    if not _check_graphviz():
        print(
            "Error: Graphviz not found. Install it with:\n"
            "  Ubuntu/Debian: sudo apt install graphviz\n"
            "  macOS: brew install graphviz\n"
            "  Or download from: https://graphviz.org/download/",
            file=sys.stderr,
        )
        return False

    try:
        result = subprocess.run(
            ["dot", f"-T{format}", "-o", str(output_path)],
            input=dot_content,
            capture_output=True,
            text=True,
            timeout=60,
        )
        if result.returncode != 0:
            print(f"Graphviz error: {result.stderr}", file=sys.stderr)
            return False
        return True
    except subprocess.TimeoutExpired:
        print("Error: Graphviz timed out (graph may be too large)", file=sys.stderr)
        return False
    except OSError as e:
        print(f"Error running Graphviz: {e}", file=sys.stderr)
        return False


def cmd_list(args: argparse.Namespace) -> int:
    """List known ports."""
    root = _ports_root_or_error(args)
    if root is None:
        return 1
    ports = list_port_paths(root)
    if args.json:
        print(json.dumps({name: str(path) for name, path in ports.items()}, indent=2))
        return 0
    if not ports:
        print(f"No ports found in {root}", file=sys.stderr)
        return 1
    print(f"Found {len(ports)} port(s):\n")
    for name, path in ports.items():
        if args.long:
            print(f"  {name}: {path}")
        else:
            print(f"  {name}")
    return 0


def cmd_depend_info(args: argparse.Namespace) -> int:
    """Show the dependencies of the given ports (or of every port)."""
    root = _ports_root_or_error(args)
    if root is None:
        return 1
    catalog = load_all_ports(root)
    fmt = select_format(dot=args.dot, dgml=args.dgml)

    # --features only matters for a filtered closure; the full catalog always has them
    output = depend_info(
        catalog,
        args.packages,
        fmt=fmt,
        include_features=True if args.features else None,
    )
    log.debug("depend_info_rendered", format=fmt.value, roots=len(args.packages))

    render_format = getattr(args, "render", None)
    if render_format:
        if fmt is not OutputFormat.DOT:
            print("Error: --render only works with --dot output.", file=sys.stderr)
            return 1
        if args.output:
            out_path = Path(args.output)
            if out_path.suffix.lower() != f".{render_format}":
                out_path = out_path.with_suffix(f".{render_format}")
        else:
            base_name = "_".join(args.packages) if args.packages else "ports"
            out_path = Path(f"{base_name}.{render_format}")
        print(f"Rendering graph to {out_path}...", file=sys.stderr)
        if not _render_dot(output, out_path, render_format):
            return 1
        print(f"Graph image saved to: {out_path}", file=sys.stderr)
        return 0

    if args.output:
        Path(args.output).write_text(output + "\n")
        print(f"Graph written to: {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive TUI."""
    from portdeps.tui.app import DepInfoApp

    app = DepInfoApp(
        root_package=getattr(args, "package", None),
        ports_root=getattr(args, "ports", None),
    )
    app.run()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the portdeps CLI."""
    parser = argparse.ArgumentParser(
        prog="portdeps",
        description="Show what ports depend on, as text or as a DOT/DGML graph.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument(
        "--ports",
        metavar="PATH",
        help="Ports directory (default: $PORTDEPS_PORTS_ROOT, $VCPKG_ROOT/ports or ./ports)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log events as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # portdeps list
    list_parser = subparsers.add_parser(
        "list",
        help="List known ports",
        description="List ports found in the ports directory.",
    )
    list_parser.add_argument(
        "-l",
        "--long",
        dest="long",
        action="store_true",
        help="Show CONTROL file paths",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    list_parser.set_defaults(func=cmd_list)

    # portdeps depend-info
    info_parser = subparsers.add_parser(
        "depend-info",
        help="Show dependencies of ports (text, DOT or DGML)",
        description=(
            "Show the transitive dependencies of the given ports. "
            "Without arguments, every port is shown with its direct dependencies."
        ),
    )
    info_parser.add_argument(
        "packages",
        nargs="*",
        metavar="PORT",
        help="Port names to start from (default: all ports)",
    )
    info_parser.add_argument(
        "--dot",
        action="store_true",
        help="Create a graph in DOT format",
    )
    info_parser.add_argument(
        "--dgml",
        action="store_true",
        help="Create a graph in DGML format",
    )
    info_parser.add_argument(
        "--features",
        action="store_true",
        help="Include feature dependencies when graphing selected ports (DGML)",
    )
    info_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )
    info_parser.add_argument(
        "--render",
        choices=["png", "svg", "pdf"],
        metavar="FORMAT",
        help="Render to image (png, svg, pdf) with --dot. Requires Graphviz installed.",
    )
    info_parser.set_defaults(func=cmd_depend_info)

    # portdeps tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive terminal UI",
        description="Start the interactive TUI for browsing ports and their dependencies.",
    )
    tui_parser.add_argument(
        "package",
        nargs="?",
        help="Optional: start with this port's dependencies",
    )
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)

    # Default to TUI if no command specified
    if args.command is None:
        return cmd_tui(argparse.Namespace(package=None, ports=args.ports))

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
