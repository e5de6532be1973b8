"""Textual TUI for browsing ports and their dependency closures."""

from __future__ import annotations

import sys
from collections import deque
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, LoadingIndicator, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from portdeps.api import build_closure, get_package_info, load_catalog
from portdeps.core.manifest import PackageRecord
from portdeps.logging_setup import configure_logging

# Welcome banner: PORTDEPS (all lines must be same length for proper centering)
WELCOME_BANNER = """\
[bold cyan]
██████╗  ██████╗ ██████╗ ████████╗██████╗ ███████╗██████╗ ███████╗
██╔══██╗██╔═══██╗██╔══██╗╚══██╔══╝██╔══██╗██╔════╝██╔══██╗██╔════╝
██████╔╝██║   ██║██████╔╝   ██║   ██║  ██║█████╗  ██████╔╝███████╗
██╔═══╝ ██║   ██║██╔══██╗   ██║   ██║  ██║██╔══╝  ██╔═══╝ ╚════██║
██║     ╚██████╔╝██║  ██║   ██║   ██████╔╝███████╗██║     ███████║
╚═╝      ╚═════╝ ╚═╝  ╚═╝   ╚═╝   ╚═════╝ ╚══════╝╚═╝     ╚══════╝
[/bold cyan]"""

WELCOME_DESC = """[dim]Browse ports and everything they depend on.
Pick a port to see its full dependency closure as a tree.[/]"""

# Limits to avoid huge trees
MAX_TREE_DEPTH = 8
MAX_TREE_NODES = 500
EXPAND_DEPTH_DEFAULT = 2

COLOR_HEADER = "bold magenta"
COLOR_PKG = "white"
COLOR_MISSING = "red"
COLOR_STATS = "cyan"
COLOR_PATH = "dim"


def _closure_stats(closure: Mapping[str, Sequence[str]], root: str) -> tuple[int, int, int]:
    """Return (direct_dependencies, total_reachable, max_depth) for root within closure."""
    direct = len(closure.get(root, ()))
    depths = {root: 0}
    queue = deque([root])
    while queue:
        name = queue.popleft()
        for dep in closure.get(name, ()):
            if dep in depths or dep not in closure:
                continue
            depths[dep] = depths[name] + 1
            queue.append(dep)
    return direct, len(depths) - 1, max(depths.values())


def _populate_textual_tree(
    tn: TreeNode,
    name: str,
    closure: Mapping[str, Sequence[str]],
    *,
    depth: int = 0,
    max_depth: int = MAX_TREE_DEPTH,
    max_nodes: int = MAX_TREE_NODES,
    seen: set[str] | None = None,
) -> None:
    """Add the dependencies of name below tn; each port is expanded only once."""
    if seen is None:
        seen = {name}
    for dep in closure.get(name, ()):
        if len(seen) >= max_nodes:
            tn.add_leaf(f"[dim]… truncated ({max_nodes} nodes max)[/]")
            return
        if dep not in closure:
            tn.add_leaf(f"[{COLOR_MISSING}]{dep}[/] [dim](not found)[/]")
            continue
        if dep in seen:
            leaf = tn.add_leaf(f"[dim]{dep} (seen)[/]")
            leaf.data = dep
            continue
        if depth >= max_depth:
            tn.add_leaf(f"[dim]{dep} …[/]")
            continue
        seen.add(dep)
        child_tn = tn.add(f"[{COLOR_PKG}]{dep}[/]", expand=False)
        child_tn.data = dep
        _populate_textual_tree(
            child_tn,
            dep,
            closure,
            depth=depth + 1,
            max_depth=max_depth,
            max_nodes=max_nodes,
            seen=seen,
        )


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


def _reset_tree(tree: Any) -> None:
    """Drop every node below the root and forget which port the root stood for."""
    tree.root.data = None
    tree.root.remove_children()


def _format_record(
    record: PackageRecord | None,
    name: str,
    closure: Mapping[str, Sequence[str]],
) -> str:
    """Details panel text for one port."""
    if record is None:
        return f"[{COLOR_MISSING}]{name}[/]\n\n(not found in ports directory)"
    direct, total, max_depth = _closure_stats(closure, name)
    features = ", ".join(f.name for f in record.features) or "(none)"
    lines = [
        f"[{COLOR_HEADER}]Port[/]",
        f"  [{COLOR_PKG}]{record.name}[/]  [dim]v{record.version or '?'}[/]",
        "",
        f"[{COLOR_HEADER}]Description[/]",
        f"  {record.description or '(no description)'}",
        "",
        f"[{COLOR_HEADER}]Stats[/]",
        f"  Direct dependencies:  [{COLOR_STATS}]{direct}[/]",
        f"  Total reachable:      [{COLOR_STATS}]{total}[/]",
        f"  Max depth from here:  [{COLOR_STATS}]{max_depth}[/] [dim]levels[/]",
        f"  Features:             {features}",
        "",
        f"[{COLOR_HEADER}]Path[/]",
        f"  [{COLOR_PATH}]{record.path or '(n/a)'}[/]",
    ]
    return "\n".join(lines)


class SearchScreen(ModalScreen[str | None]):
    """Ask for a substring to look for among the port names in the tree."""

    BINDINGS = [Binding("escape", "dismiss_empty", "Cancel")]

    DEFAULT_CSS = """
    SearchScreen { align: center middle; }
    SearchScreen > Vertical { width: 64; height: auto; padding: 1 2; border: round $accent; }
    SearchScreen Static { text-align: center; }
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[bold cyan]Find port[/]")
            yield Input(placeholder="part of a port name", id="search_input")
            yield Static("[dim]Enter[/] search  ·  [dim]n[/]/[dim]N[/] next/previous  ·  [dim]Esc[/] cancel")

    def on_mount(self) -> None:
        self.query_one(Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip() or None)

    def action_dismiss_empty(self) -> None:
        self.dismiss(None)


class DepInfoApp(App[None]):
    """Terminal UI to explore port dependency closures."""

    TITLE = "portdeps"
    BINDINGS = [
        Binding("enter", "start_main", "Start", show=False),
        Binding("escape", "back", "Back", show=True),
        Binding("b", "back", "Back", show=False),
        Binding("/", "search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Reload ports"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #welcome_container { align: center middle; }
    #welcome_container Static { width: 100%; text-align: center; }
    #welcome_desc { padding: 1 4; }
    #welcome_loading { display: none; height: auto; }
    #welcome_loading.loading { display: block; }
    #main_container { display: none; }
    #details { height: auto; min-height: 8; padding: 1 2; border: tall $primary; }
    """

    def __init__(
        self,
        root_package: str | None = None,
        ports_root: Path | str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._root_package = root_package
        self._ports_root = ports_root
        self._main_started = False
        self._catalog: list[PackageRecord] | None = None
        self._catalog_loading = False
        self._catalog_error: str | None = None
        self._closure: dict[str, list[str]] = {}
        self._search_matches: list[TreeNode] = []
        self._search_index = 0
        self._details_visible = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Container(id="welcome_container"):
            yield Static(WELCOME_BANNER, id="welcome_banner", markup=True)
            yield Static(WELCOME_DESC, id="welcome_desc", markup=True)
            yield Static(
                "[cyan]Enter[/] to explore  ·  [dim]q[/] to quit",
                id="welcome_hint",
                markup=True,
            )
            with Container(id="welcome_loading"):
                yield LoadingIndicator()
                yield Static("[dim]Loading ports...[/]", id="loading_text", markup=True)
        with Container(id="main_container"):
            yield Tree("Ports", id="dep_tree")
            yield Static(
                "[dim]↑/↓[/] move  ·  [dim]Enter[/] select  ·  [dim]Esc[/]/[dim]b[/] = Back",
                id="details",
            )
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = "Port Dependency Explorer"
        self._start_catalog_load()

    def on_key(self, event: Any) -> None:
        """Enter on the welcome screen opens the main view."""
        if not self._main_started and event.key == "enter":
            event.prevent_default()
            event.stop()
            self.action_start_main()

    def _start_catalog_load(self) -> None:
        if self._catalog is not None or self._catalog_loading:
            return
        self._catalog_loading = True
        self.query_one("#welcome_loading").add_class("loading")
        self.run_worker(self._load_catalog_worker, thread=True)

    def _load_catalog_worker(self) -> list[PackageRecord]:
        return load_catalog(self._ports_root)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.SUCCESS:
            self._catalog = event.worker.result
            self._catalog_loading = False
            self._catalog_error = None
        elif event.state == WorkerState.ERROR:
            self._catalog_loading = False
            self._catalog_error = str(event.worker.error)
        else:
            return
        self._update_loading_status()
        if self._main_started:
            self._load_main_view()

    def _update_loading_status(self) -> None:
        self.query_one("#welcome_loading").remove_class("loading")
        hint = self.query_one("#welcome_hint", Static)
        if self._catalog_error:
            hint.update(f"[red]Error: {self._catalog_error}[/]")
        elif self._catalog is not None:
            hint.update(
                f"[green]✓[/] {len(self._catalog)} ports found  ·  "
                "[cyan]Enter[/] to explore  ·  [dim]q[/] to quit"
            )

    def action_start_main(self) -> None:
        """Transition from welcome screen to main view."""
        if self._main_started:
            return
        self._main_started = True
        self.query_one("#welcome_container").styles.display = "none"
        self.query_one("#main_container").styles.display = "block"
        self._load_main_view()

    def _load_main_view(self) -> None:
        tree = self.query_one("#dep_tree", Tree)
        _reset_tree(tree)
        if self._catalog_loading:
            tree.root.label = f"[{COLOR_HEADER}]Loading ports...[/]"
            self._set_details("[dim]Reading CONTROL files in background...[/]")
            tree.focus()
            return
        if self._root_package:
            self._load_closure(self._root_package)
            return
        catalog = self._catalog or []
        if not catalog:
            tree.root.label = f"[{COLOR_HEADER}]Ports[/]"
            tree.root.add_leaf("[dim]No ports found[/]")
            self._set_details(
                "No ports found. Start with --ports PATH or set PORTDEPS_PORTS_ROOT."
            )
            tree.focus()
            return
        tree.root.label = f"[{COLOR_HEADER}]Ports ({len(catalog)})[/]"
        for record in catalog:
            count = len(record.dependencies)
            child_tn = tree.root.add_leaf(f"[{COLOR_PKG}]{record.name}[/] [dim]({count})[/]")
            child_tn.data = record.name
        tree.root.expand()
        self._set_details(
            f"[{COLOR_HEADER}]Port list[/]\n\n"
            f"Total: [{COLOR_STATS}]{len(catalog)}[/] ports\n\n"
            "[dim]↑/↓[/] move  ·  [dim]Enter[/] on a port = show dependencies"
        )
        tree.focus()

    def _load_closure(self, root_package: str) -> None:
        self._root_package = root_package
        catalog = self._catalog or []
        self._closure = build_closure(catalog, [root_package])
        record = get_package_info(catalog, root_package)
        tree = self.query_one("#dep_tree", Tree)
        _reset_tree(tree)
        if record is None:
            tree.root.label = f"[{COLOR_MISSING}]{root_package}[/]"
            self._set_details(f"Port not found: {root_package}")
            return
        tree.root.label = f"[{COLOR_HEADER}]{record.name}[/] [dim]v{record.version or '?'}[/]"
        tree.root.data = record.name
        _populate_textual_tree(tree.root, record.name, self._closure)
        _expand_to_depth(tree.root, EXPAND_DEPTH_DEFAULT)
        self._set_details(_format_record(record, record.name, self._closure))
        tree.focus()

    def _set_details(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        name = event.node.data
        if not isinstance(name, str):
            return
        if self._root_package is None:
            self._load_closure(name)
            return
        record = get_package_info(self._catalog or [], name)
        self._set_details(_format_record(record, name, self._closure))

    def action_back(self) -> None:
        """Return to the port list (only when viewing a closure)."""
        if not self._main_started or not self._root_package:
            return
        self._root_package = None
        self._closure = {}
        self._load_main_view()

    def action_refresh(self) -> None:
        if not self._main_started:
            return
        self._catalog = None
        self._start_catalog_load()
        self._load_main_view()

    def action_search(self) -> None:
        if not self._main_started:
            return
        self.push_screen(SearchScreen(), self._on_search_done)

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        self._search_matches = []
        self._search_index = 0
        tree = self.query_one("#dep_tree", Tree)
        self._collect_matches(tree.root, query.lower())
        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self.notify(
            f"Found {len(self._search_matches)} match(es) for '{query}'",
            severity="information",
            timeout=2,
        )
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        data_str = str(node.data).lower() if node.data else ""
        if query in str(node.label).lower() or query in data_str:
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]
        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        tree = self.query_one("#dep_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)

    def action_next_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        if not self._search_matches:
            self.notify("No active search. Press / to search.", severity="information", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"

    def action_quit(self) -> None:
        self.exit()


def main() -> None:
    """Entry point for the portdeps TUI."""
    configure_logging()
    root = None
    if len(sys.argv) > 1:
        root = sys.argv[1].strip()
    app = DepInfoApp(root_package=root)
    app.run()


if __name__ == "__main__":
    main()
