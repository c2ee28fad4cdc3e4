from typing import Optional

import click


class XtaskError(click.ClickException):
    """
    Base class for errors which abort an xtask invocation.

    Click prints these as ``Error: <message>``. The message is followed by one
    ``Caused by:`` line for every exception in the ``__cause__`` chain.
    """

    def format_message(self) -> str:
        lines = [self.message]
        cause: Optional[BaseException] = self.__cause__
        while cause is not None:
            lines.append(f"Caused by: {cause}")
            cause = cause.__cause__
        return "\n".join(lines)


class CommandFailed(XtaskError):
    """An external command couldn't be started, or exited unsuccessfully."""

    def __init__(self, command: str, cause: BaseException) -> None:
        super().__init__(f"failed to run command `{command}`")
        self.command = command
        self.__cause__ = cause


class IoFailed(XtaskError):
    """A filesystem operation failed."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"failed to {operation}")
        self.operation = operation
        self.__cause__ = cause


class WorkspaceNotFound(XtaskError):
    """`cargo metadata` didn't tell us where the workspace root is."""


class ManifestError(XtaskError):
    """CMakeLists.txt doesn't have the region we manage."""
