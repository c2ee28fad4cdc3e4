import contextlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import click
import rich
import rich.markup

from xtask import CARGO_KEY, CRATE_PREFIX
from xtask.cargo import locate_workspace, run_command
from xtask.errors import IoFailed
from xtask.manifest import patch_manifest, registration
from xtask.templates import (
    BUILD_DEPENDENCIES,
    CARGO_TOML_LIB,
    LIB_RS,
    RUNTIME_DEPENDENCIES,
    build_rs,
)

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9_-]*")


def crate_name(name: str) -> str:
    """The cargo package name for the crate living in directory name"""
    return CRATE_PREFIX + name


@dataclass(frozen=True)
class CrateSpec:
    name: str
    """The short name, which is also the crate's directory in the workspace"""

    @property
    def qualified_name(self) -> str:
        return crate_name(self.name)

    @property
    def directory(self) -> Path:
        return Path(self.name)

    @property
    def registration(self) -> str:
        return registration(self.name, self.qualified_name)


def _report_failure(description: str) -> None:
    rich.print(f"[bold red]Step failed:[/bold red] {rich.markup.escape(description)}")


@contextlib.contextmanager
def _step(description: str) -> Iterator[None]:
    """
    Announce a scaffolding step, and report it if it fails.

    OSErrors raised inside the step become IoFailed.
    """
    rich.get_console().rule(rich.markup.escape(description))
    try:
        yield
    except OSError as e:
        _report_failure(description)
        raise IoFailed(description, e) from e
    except click.ClickException:
        _report_failure(description)
        raise


def scaffold(workspace: Path, spec: CrateSpec, cargo: str = "cargo") -> None:
    """
    Create spec's crate in workspace and register it in CMakeLists.txt.

    Nothing is rolled back if a step fails.
    """
    dst = workspace / spec.directory
    with _step(f"create crate {spec.qualified_name}"):
        run_command(
            [cargo, "new", "--name", spec.qualified_name, "--lib", spec.name], workspace
        )
    with _step(f"append [lib] section to {dst / 'Cargo.toml'}"):
        with (dst / "Cargo.toml").open("a") as f:
            f.write(CARGO_TOML_LIB)
    with _step(f"add dependencies to {spec.qualified_name}"):
        run_command([cargo, "add"] + RUNTIME_DEPENDENCIES, dst)
        run_command([cargo, "add", "--build"] + BUILD_DEPENDENCIES, dst)
    with _step(f"write {dst / 'build.rs'}"):
        (dst / "build.rs").write_text(build_rs(spec.qualified_name))
    with _step(f"write {dst / 'src' / 'lib.rs'}"):
        (dst / "src").mkdir(parents=True, exist_ok=True)
        (dst / "src" / "lib.rs").write_text(LIB_RS)
    with _step(f"register {spec.qualified_name} in CMakeLists.txt"):
        patch_manifest(workspace / "CMakeLists.txt", spec.registration)


def _validate_name(ctx: click.Context, param: click.Parameter, value: str) -> str:
    if not _NAME_RE.fullmatch(value):
        raise click.BadParameter(
            f"{value!r} must start with a letter and contain only letters, digits, '_' and '-'"
        )
    return value


@click.command()
@click.argument("name", callback=_validate_name)
@click.pass_context
def new(ctx: click.Context, name: str) -> None:
    """
    Add a new sub crate

    NAME is the directory of the new crate in the workspace. Its package name
    will be hematite_NAME.

    For example: cargo xtask new launcher_core
    """
    cargo = ctx.obj[CARGO_KEY]
    workspace = locate_workspace(cargo, Path.cwd())
    spec = CrateSpec(name)
    scaffold(workspace, spec, cargo)
    dst = rich.markup.escape(str(workspace / spec.directory))
    rich.print(f"Created [bold]{spec.qualified_name}[/bold] in {dst}")
