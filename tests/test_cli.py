"""Tests for portdeps CLI."""

from __future__ import annotations

import argparse
import json
import os
import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest import mock

import pytest

from portdeps.cli import (
    _check_graphviz,
    _render_dot,
    cmd_depend_info,
    cmd_list,
    main,
)
from portdeps.core.finder import PORTS_ROOT_ENV, VCPKG_ROOT_ENV


def _info_args(ports: Path, *packages: str, **overrides) -> argparse.Namespace:
    values = {
        "ports": str(ports),
        "packages": list(packages),
        "dot": False,
        "dgml": False,
        "features": False,
        "output": None,
        "render": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def ports(write_port: Callable[..., Path]) -> Path:
    write_port("app", "lib-a, zlib")
    write_port("lib-a", "zlib")
    write_port("zlib")
    return write_port("curl", "zlib", extra="Feature: ssl\nBuild-Depends: openssl\n")


class TestCmdList:
    """Tests for cmd_list command."""

    def test_lists_ports(self, ports: Path, capsys) -> None:
        args = argparse.Namespace(ports=str(ports), json=False, long=False)
        assert cmd_list(args) == 0
        out = capsys.readouterr().out
        assert "Found 4 port(s)" in out
        assert "  curl" in out

    def test_long(self, ports: Path, capsys) -> None:
        args = argparse.Namespace(ports=str(ports), json=False, long=True)
        assert cmd_list(args) == 0
        assert str(ports / "zlib" / "CONTROL") in capsys.readouterr().out

    def test_json(self, ports: Path, capsys) -> None:
        args = argparse.Namespace(ports=str(ports), json=True, long=False)
        assert cmd_list(args) == 0
        data = json.loads(capsys.readouterr().out)
        assert sorted(data) == ["app", "curl", "lib-a", "zlib"]

    def test_empty_ports_dir(self, tmp_path: Path, capsys) -> None:
        args = argparse.Namespace(ports=str(tmp_path), json=False, long=False)
        assert cmd_list(args) == 1
        assert "No ports found" in capsys.readouterr().err

    def test_missing_ports_dir(self, tmp_path: Path, capsys) -> None:
        args = argparse.Namespace(ports=str(tmp_path / "nope"), json=False, long=False)
        assert cmd_list(args) == 1
        assert "Ports directory not found" in capsys.readouterr().err


class TestCmdDependInfo:
    """Tests for cmd_depend_info command."""

    def test_plain_all(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports)) == 0
        assert capsys.readouterr().out.splitlines() == [
            "app: lib-a, zlib",
            "curl: zlib",
            "lib-a: zlib",
            "zlib: ",
        ]

    def test_plain_filtered(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, "lib-a")) == 0
        assert capsys.readouterr().out.splitlines() == ["lib-a: zlib", "zlib: "]

    def test_unknown_package_is_not_an_error(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, "nothing")) == 0
        assert capsys.readouterr().out == "\n"

    def test_dot(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, "app", dot=True)) == 0
        out = capsys.readouterr().out.strip()
        assert out.startswith("digraph G{")
        assert "app -> lib_a;" in out
        assert out.endswith('empty [label="1 singletons..."]; }')

    def test_dot_wins_over_dgml(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, dot=True, dgml=True)) == 0
        assert capsys.readouterr().out.startswith("digraph")

    def test_dgml(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, dgml=True)) == 0
        out = capsys.readouterr().out
        assert '<Link Source="curl" Target="openssl" />' in out

    def test_dgml_filtered_features_flag(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, "curl", dgml=True)) == 0
        assert "openssl" not in capsys.readouterr().out
        assert cmd_depend_info(_info_args(ports, "curl", dgml=True, features=True)) == 0
        assert '<Link Source="curl" Target="openssl" />' in capsys.readouterr().out

    def test_output_to_file(self, ports: Path, tmp_path: Path, capsys) -> None:
        out_file = tmp_path / "graph.dot"
        assert cmd_depend_info(_info_args(ports, "app", dot=True, output=str(out_file))) == 0
        assert out_file.read_text().startswith("digraph G{")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Graph written to" in captured.err

    def test_missing_ports_dir(self, tmp_path: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(tmp_path / "nope")) == 1
        assert "Ports directory not found" in capsys.readouterr().err

    def test_render_requires_dot(self, ports: Path, capsys) -> None:
        assert cmd_depend_info(_info_args(ports, dgml=True, render="png")) == 1
        assert "--render only works with --dot" in capsys.readouterr().err

    def test_render_with_graphviz(self, ports: Path, tmp_path: Path, capsys) -> None:
        out_file = tmp_path / "graph.out"
        with mock.patch("portdeps.cli._render_dot", return_value=True) as render_dot:
            rc = cmd_depend_info(_info_args(ports, "app", dot=True, render="svg", output=str(out_file)))
        assert rc == 0
        dot_content, out_path, fmt = render_dot.call_args.args
        assert dot_content.startswith("digraph")
        assert out_path == tmp_path / "graph.svg"
        assert fmt == "svg"
        assert "Graph image saved to" in capsys.readouterr().err

    def test_render_failure(self, ports: Path) -> None:
        with mock.patch("portdeps.cli._render_dot", return_value=False):
            assert cmd_depend_info(_info_args(ports, dot=True, render="png")) == 1


class TestGraphvizHelpers:
    """Tests for Graphviz helpers."""

    def test_check_graphviz(self) -> None:
        with mock.patch("portdeps.cli.shutil.which", return_value="/usr/bin/dot"):
            assert _check_graphviz() is True
        with mock.patch("portdeps.cli.shutil.which", return_value=None):
            assert _check_graphviz() is False

    def test_render_dot_no_graphviz(self, tmp_path: Path, capsys) -> None:
        with mock.patch("portdeps.cli._check_graphviz", return_value=False):
            assert _render_dot("digraph G{}", tmp_path / "out.png", "png") is False
        assert "Graphviz not found" in capsys.readouterr().err

    def test_render_dot_success(self, tmp_path: Path) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with (
            mock.patch("portdeps.cli._check_graphviz", return_value=True),
            mock.patch("portdeps.cli.subprocess.run", return_value=completed) as run,
        ):
            assert _render_dot("digraph G{}", tmp_path / "out.png", "png") is True
        assert run.call_args.args[0] == ["dot", "-Tpng", "-o", str(tmp_path / "out.png")]

    def test_render_dot_error(self, tmp_path: Path, capsys) -> None:
        completed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="syntax error")
        with (
            mock.patch("portdeps.cli._check_graphviz", return_value=True),
            mock.patch("portdeps.cli.subprocess.run", return_value=completed),
        ):
            assert _render_dot("bad", tmp_path / "out.png", "png") is False
        assert "syntax error" in capsys.readouterr().err

    def test_render_dot_timeout(self, tmp_path: Path, capsys) -> None:
        with (
            mock.patch("portdeps.cli._check_graphviz", return_value=True),
            mock.patch(
                "portdeps.cli.subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd="dot", timeout=60),
            ),
        ):
            assert _render_dot("digraph G{}", tmp_path / "out.png", "png") is False
        assert "timed out" in capsys.readouterr().err


class TestMain:
    """Tests for main entry point."""

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_help(self, capsys) -> None:
        with pytest.raises(SystemExit):
            main(["--help"])
        out = capsys.readouterr().out
        assert "depend-info" in out
        assert "list" in out

    def test_depend_info_help(self, capsys) -> None:
        with pytest.raises(SystemExit):
            main(["depend-info", "--help"])
        out = capsys.readouterr().out
        assert "--dot" in out
        assert "--dgml" in out

    def test_depend_info_command(self, ports: Path, capsys) -> None:
        assert main(["--ports", str(ports), "depend-info", "app"]) == 0
        assert capsys.readouterr().out.splitlines()[0] == "app: lib-a, zlib"

    def test_depend_info_env_root(self, ports: Path, capsys) -> None:
        with mock.patch.dict(os.environ, {PORTS_ROOT_ENV: str(ports)}):
            assert main(["depend-info", "--dot", "zlib"]) == 0
        assert 'empty [label="1 singletons..."]' in capsys.readouterr().out

    def test_list_command(self, ports: Path, capsys) -> None:
        assert main(["--ports", str(ports), "list", "--json"]) == 0
        assert "curl" in json.loads(capsys.readouterr().out)

    def test_no_ports(self, tmp_path: Path, monkeypatch, capsys) -> None:
        monkeypatch.chdir(tmp_path)
        with mock.patch.dict(os.environ, {PORTS_ROOT_ENV: "", VCPKG_ROOT_ENV: ""}):
            assert main(["depend-info"]) == 1
        assert "Ports directory not found" in capsys.readouterr().err

    def test_verbose_logs_to_stderr(self, ports: Path, capsys) -> None:
        assert main(["-v", "--ports", str(ports), "depend-info", "app"]) == 0
        captured = capsys.readouterr()
        assert "app: lib-a, zlib" in captured.out
        assert "ports_loaded" not in captured.out

    def test_no_command_launches_tui(self) -> None:
        with mock.patch("portdeps.cli.cmd_tui", return_value=0) as cmd_tui:
            assert main([]) == 0
        assert cmd_tui.call_args.args[0].package is None
