import json
import shlex
import subprocess
from pathlib import Path
from typing import Sequence

import rich
import rich.markup

from xtask.errors import CommandFailed, WorkspaceNotFound

_WORKSPACE_ROOT_MARKER = '"workspace_root":"'


def run_command(args: Sequence[str], cwd: Path) -> None:
    """
    Run args in cwd, raising CommandFailed if it can't be started or exits non-zero.

    The command is announced on the console before it runs.
    """
    cmd_name = shlex.join(args)
    rich.get_console().rule(rich.markup.escape(cmd_name))
    try:
        subprocess.check_call(list(args), cwd=cwd)
    except (OSError, subprocess.CalledProcessError) as e:
        raise CommandFailed(cmd_name, e) from e


def _parse_workspace_root(metadata: str) -> Path:
    start = metadata.find(_WORKSPACE_ROOT_MARKER)
    if start < 0:
        raise WorkspaceNotFound(
            "couldn't find workspace root in `cargo metadata` output"
        )
    # Back up to the opening quote so the value is decoded as a JSON string.
    quote = start + len(_WORKSPACE_ROOT_MARKER) - 1
    try:
        root, _ = json.JSONDecoder().raw_decode(metadata, quote)
    except json.JSONDecodeError as e:
        raise WorkspaceNotFound("couldn't find workspace root") from e
    return Path(root)


def locate_workspace(cargo: str, cwd: Path) -> Path:
    """Ask cargo for the root of the workspace containing cwd."""
    args = [cargo, "metadata", "--no-deps", "--format-version=1"]
    try:
        out = subprocess.check_output(args, cwd=cwd)
    except (OSError, subprocess.CalledProcessError) as e:
        raise CommandFailed(shlex.join(args), e) from e
    try:
        metadata = out.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WorkspaceNotFound("`cargo metadata` output isn't valid UTF-8") from e
    return _parse_workspace_root(metadata)
