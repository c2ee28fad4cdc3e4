import json
import subprocess
from pathlib import Path
from typing import Any, List, Tuple

import pytest
import toml
from click.testing import CliRunner

from xtask import __version__
from xtask.errors import CommandFailed
from xtask.main import main
from xtask.manifest import patch_manifest
from xtask.new_crate import CrateSpec, crate_name, scaffold

_CMAKE = """project(hematite)
# BEGIN CRATES_TO_BUILD
LinkCxxQtCrate(core hematite_core)
# END CRATES_TO_BUILD
add_subdirectory(launcher)
"""


class FakeCargo:
    """Stands in for the `cargo new` and `cargo add` invocations."""

    def __init__(self) -> None:
        self.calls: List[Tuple[List[str], Path]] = []

    def __call__(self, args: List[str], cwd: Path) -> int:
        self.calls.append((args, Path(cwd)))
        if args[1] == "new":
            dst = Path(cwd) / args[-1]
            if dst.exists():
                raise subprocess.CalledProcessError(101, args)
            (dst / "src").mkdir(parents=True)
            (dst / "Cargo.toml").write_text(
                f'[package]\nname = "{args[3]}"\nversion = "0.1.0"\nedition = "2021"\n\n[dependencies]\n'
            )
            (dst / "src" / "lib.rs").write_text("pub fn add() {}\n")
        return 0


@pytest.fixture
def cargo(monkeypatch: pytest.MonkeyPatch) -> FakeCargo:
    fake = FakeCargo()
    monkeypatch.setattr(subprocess, "check_call", fake)
    return fake


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "CMakeLists.txt").write_text(_CMAKE)
    return tmp_path


def test_crate_name() -> None:
    assert crate_name("foo") == "hematite_foo"
    assert crate_name("foo") == crate_name("foo")
    names = ["a", "a_b", "a-b", "ab", "b"]
    assert len({crate_name(name) for name in names}) == len(names)


def test_crate_spec() -> None:
    spec = CrateSpec("foo")
    assert spec.qualified_name == "hematite_foo"
    assert spec.directory == Path("foo")
    assert spec.registration == "LinkCxxQtCrate(foo hematite_foo)"


def test_scaffold(workspace: Path, cargo: FakeCargo) -> None:
    scaffold(workspace, CrateSpec("ui"))
    dst = workspace / "ui"
    assert cargo.calls == [
        (["cargo", "new", "--name", "hematite_ui", "--lib", "ui"], workspace),
        (["cargo", "add", "cxx", "cxx-qt", "cxx-qt-lib"], dst),
        (["cargo", "add", "--build", "cxx-qt-build"], dst),
    ]
    manifest = toml.loads((dst / "Cargo.toml").read_text())
    assert manifest["package"]["name"] == "hematite_ui"
    assert manifest["lib"]["crate-type"] == ["staticlib"]
    build_rs = (dst / "build.rs").read_text()
    assert build_rs.startswith("//Generated build.rs, modify as needed\n")
    assert 'uri: "org.prismlauncher.hematite.hematite_ui"' in build_rs
    assert "$crate" not in build_rs
    lib_rs = (dst / "src" / "lib.rs").read_text()
    assert lib_rs.startswith("/// The bridge definition for our QObject\n")
    assert "pub struct MyObjectRust {" in lib_rs
    assert (workspace / "CMakeLists.txt").read_text() == (
        "project(hematite)\n"
        "# BEGIN CRATES_TO_BUILD\n"
        "LinkCxxQtCrate(core hematite_core)\n"
        "LinkCxxQtCrate(ui hematite_ui)\n"
        "# END CRATES_TO_BUILD\n"
        "add_subdirectory(launcher)\n"
    )


def test_scaffold_twice_fails_without_duplicates(
    workspace: Path, cargo: FakeCargo
) -> None:
    spec = CrateSpec("ui")
    scaffold(workspace, spec)
    cmake = (workspace / "CMakeLists.txt").read_text()
    with pytest.raises(CommandFailed):
        scaffold(workspace, spec)
    assert (workspace / "CMakeLists.txt").read_text() == cmake
    patch_manifest(workspace / "CMakeLists.txt", spec.registration)
    assert (workspace / "CMakeLists.txt").read_text().count(spec.registration) == 1


def _fake_metadata(workspace: Path) -> Any:
    def check_output(args: Any, cwd: Any) -> bytes:
        return json.dumps(
            {"packages": [], "workspace_root": str(workspace), "version": 1},
            separators=(",", ":"),
        ).encode("utf-8")

    return check_output


def test_cli_new(
    monkeypatch: pytest.MonkeyPatch, workspace: Path, cargo: FakeCargo
) -> None:
    monkeypatch.setattr(subprocess, "check_output", _fake_metadata(workspace))
    monkeypatch.setenv("CARGO", "/opt/cargo/bin/cargo")
    result = CliRunner().invoke(main, ["new", "ui"])
    assert result.exit_code == 0, result.output
    assert cargo.calls[0][0][0] == "/opt/cargo/bin/cargo"
    assert (workspace / "ui" / "build.rs").exists()


def test_cli_rejects_bad_name(cargo: FakeCargo) -> None:
    result = CliRunner().invoke(main, ["new", "9lives"])
    assert result.exit_code != 0
    assert cargo.calls == []


def test_cli_reports_cause_chain(
    monkeypatch: pytest.MonkeyPatch, workspace: Path, cargo: FakeCargo
) -> None:
    monkeypatch.delenv("CARGO", raising=False)
    monkeypatch.setattr(subprocess, "check_output", _fake_metadata(workspace))
    (workspace / "ui").mkdir()
    result = CliRunner().invoke(main, ["new", "ui"])
    assert result.exit_code == 1
    assert "Error: failed to run command `cargo new --name hematite_ui --lib ui`" in result.output
    assert "Caused by: Command '['cargo', 'new'" in result.output


def test_cli_missing_workspace_root(
    monkeypatch: pytest.MonkeyPatch, cargo: FakeCargo
) -> None:
    monkeypatch.setattr(subprocess, "check_output", lambda args, cwd: b"{}")
    result = CliRunner().invoke(main, ["new", "ui"])
    assert result.exit_code == 1
    assert "couldn't find workspace root" in result.output
    assert cargo.calls == []


@pytest.mark.parametrize("name", ["foo\n", "foo bar", "-foo", ""])
def test_cli_rejects_name_before_running_cargo(
    monkeypatch: pytest.MonkeyPatch, workspace: Path, cargo: FakeCargo, name: str
) -> None:
    monkeypatch.setattr(subprocess, "check_output", _fake_metadata(workspace))
    result = CliRunner().invoke(main, ["new", name])
    assert result.exit_code == 2
    assert cargo.calls == []
    assert (workspace / "CMakeLists.txt").read_text() == _CMAKE


def test_cli_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
