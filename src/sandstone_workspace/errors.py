"""Exceptions raised by sandstone-workspace."""


class WorkspaceError(Exception):
    """Base class for errors reported to the operator."""


class ConfigurationError(WorkspaceError):
    """The configuration file could not be loaded."""


class ManifestError(WorkspaceError):
    """A JSON manifest or package.json is missing or invalid."""


class CommandError(WorkspaceError):
    """An external command exited with a non-zero status."""

    def __init__(
        self, command: list[str], returncode: int, stderr: str = ''
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f'`{" ".join(command)}` exited with status {returncode}'
        if stderr:
            message = f'{message}: {stderr}'
        super().__init__(message)


class RegistryError(WorkspaceError):
    """The package registry did not return a usable version."""

    def __init__(self, package: str, reason: str) -> None:
        self.package = package
        self.reason = reason
        super().__init__(
            f'Failed to fetch latest version for {package}: {reason}'
        )
