"""Package manager operations (``bun`` by default)."""

import logging
import pathlib

from sandstone_workspace import models, utils

LOGGER = logging.getLogger(__name__)


class PackageManager:
    """Runs package manager commands in workspace directories."""

    def __init__(self, config: models.PackageManagerConfiguration) -> None:
        self.config = config

    async def _run(
        self, directory: pathlib.Path, *args: str, capture: bool = False
    ) -> utils.CommandResult:
        return await utils.run_command(
            self.config.executable, *args, cwd=directory, capture=capture
        )

    def needs_install(self, directory: pathlib.Path) -> bool:
        """Return True if the lock file exists but node_modules does not."""
        return (directory / self.config.lock_file).exists() and not (
            directory / 'node_modules'
        ).exists()

    async def install(self, directory: pathlib.Path) -> utils.CommandResult:
        result = await self._run(directory, 'install')
        if result.ok and self.config.trust_dependencies:
            await self._run(directory, 'pm', 'trust', '--all', capture=True)
        return result

    async def build(self, directory: pathlib.Path) -> utils.CommandResult:
        return await self._run(directory, 'run', 'build')

    async def register(self, directory: pathlib.Path) -> utils.CommandResult:
        """Register the package in ``directory`` for linking."""
        return await self._run(directory, 'link')

    async def unregister(
        self, directory: pathlib.Path
    ) -> utils.CommandResult:
        return await self._run(directory, 'unlink', capture=True)

    async def link(
        self, directory: pathlib.Path, package: str
    ) -> utils.CommandResult:
        """Link a registered package into the project in ``directory``."""
        return await self._run(directory, 'link', package, '--save')
