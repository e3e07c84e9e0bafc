"""Local package linking operations.

Switches consumers between published registry versions of the workspace
packages and the local checkouts. Two mechanisms are supported:

- registration mode (default): packages are registered with the package
  manager's ``link`` command and consumers depend on ``link:`` specs.
- file mode (``--local``): consumers depend on ``file:`` paths; the
  original dependency sections are saved to a backup file next to the
  consumer's package.json and restored on unlink.
"""

import enum
import os
import pathlib

from sandstone_workspace import (
    errors,
    mixins,
    models,
    package_json,
    package_manager,
    registry,
    steps,
)


class LinkCommand(enum.StrEnum):
    link = 'link'
    unlink = 'unlink'


class LinkActions(mixins.LoggerMixin):
    """Links and unlinks local workspace packages into their consumers."""

    def __init__(
        self, configuration: models.Configuration, verbose: bool = False
    ) -> None:
        super().__init__(verbose)
        self._set_command_logger('link')
        self.configuration = configuration
        self.package_manager = package_manager.PackageManager(
            configuration.package_manager
        )
        self.pending: list[models.LinkTarget] = []
        self.versions: dict[str, str] = {}

    async def execute(
        self, command: LinkCommand, local: bool = False
    ) -> models.StepResult:
        match (command, local):
            case (LinkCommand.link, False):
                plan = self._link_steps()
            case (LinkCommand.unlink, False):
                plan = self._unlink_steps()
            case (LinkCommand.link, True):
                plan = self._link_local_steps()
            case (LinkCommand.unlink, True):
                plan = self._unlink_local_steps()
            case _:
                raise RuntimeError(f'Unsupported command: {command}')
        return await steps.StepRunner(self.verbose).execute(plan)

    def _directory(self, path: pathlib.Path) -> pathlib.Path:
        return self.configuration.path(path)

    def _read_consumers(
        self, targets: list[models.LinkTarget]
    ) -> dict[pathlib.Path, models.PackageJson]:
        return {
            consumer: package_json.read_package(self._directory(consumer))
            for consumer in self.configuration.consumers(targets)
        }

    def _linked_targets(
        self, targets: list[models.LinkTarget]
    ) -> list[models.LinkTarget]:
        packages = self._read_consumers(targets)
        return [
            target
            for target in targets
            if packages[target.consumer].is_linked(
                target.section, target.package
            )
        ]

    async def _build_packages(
        self, packages: list[models.LocalPackage]
    ) -> bool:
        for package in packages:
            directory = self._directory(package.directory)
            if (directory / package.build_output).exists():
                self.logger.info(
                    '%s already built, skipping...', package.name
                )
                continue
            self.logger.info('Building %s...', package.name)
            (await self.package_manager.build(directory)).check()
            self.logger.info('%s built', package.name)
        return True

    # Registration mode

    def _link_steps(self) -> list[steps.Step]:
        return [
            steps.Step(name='inspect', run=self._inspect_link),
            steps.Step(
                name='build',
                run=lambda: self._build_packages(self.configuration.packages),
                guard=steps.after('inspect'),
            ),
            steps.Step(
                name='register',
                run=self._register,
                guard=steps.after('build'),
            ),
            steps.Step(
                name='link',
                run=self._link_targets,
                guard=steps.after('register'),
            ),
        ]

    async def _inspect_link(self) -> models.StepOutcome:
        linked = self._linked_targets(self.configuration.links)
        self.pending = [
            target
            for target in self.configuration.links
            if target not in linked
        ]
        if not self.pending:
            self.logger.info('Packages are already linked.')
            return models.StepOutcome.skipped
        self.logger.info('Linking local packages for development...')
        return models.StepOutcome.completed

    async def _register(self) -> bool:
        for package in self.configuration.packages:
            self.logger.info('Registering %s...', package.name)
            result = await self.package_manager.register(
                self._directory(package.directory)
            )
            result.check()
        return True

    async def _link_targets(self) -> bool:
        for target in self.pending:
            self.logger.info(
                'Linking %s into %s...', target.package, target.consumer
            )
            result = await self.package_manager.link(
                self._directory(target.consumer), target.package
            )
            result.check()
        self.logger.info('All packages linked for local development!')
        self.logger.info(
            'To restore registry versions before committing run: '
            'sandstone-workspace unlink'
        )
        return True

    def _unlink_steps(self) -> list[steps.Step]:
        return [
            steps.Step(name='inspect', run=self._inspect_unlink),
            steps.Step(
                name='unregister',
                run=self._unregister,
                guard=steps.after('inspect'),
            ),
            steps.Step(
                name='versions',
                run=self._fetch_versions,
                guard=steps.after('unregister'),
            ),
            steps.Step(
                name='restore',
                run=self._restore,
                guard=steps.after('versions'),
            ),
        ]

    async def _inspect_unlink(self) -> models.StepOutcome:
        self.pending = self._linked_targets(self.configuration.links)
        if not self.pending:
            self.logger.info('Packages are already unlinked.')
            return models.StepOutcome.skipped
        self.logger.info('Unlinking local packages...')
        return models.StepOutcome.completed

    async def _unregister(self) -> bool:
        for package in self.configuration.packages:
            self.logger.info('Unregistering %s...', package.name)
            result = await self.package_manager.unregister(
                self._directory(package.directory)
            )
            if not result.ok:
                self._log_verbose_info(
                    '%s was not registered: %s',
                    package.name,
                    result.stderr.strip(),
                )
        return True

    async def _fetch_versions(self) -> bool:
        names = list(
            dict.fromkeys(
                target.package
                for target in self.pending
                if self.configuration.package(target.package).published
            )
        )
        if not names:
            self.versions = {}
            return True
        self.logger.info('Fetching latest versions from the registry...')
        async with registry.Registry(self.configuration.registry) as client:
            self.versions = await client.get_caret_ranges(names)
        for name, version in self.versions.items():
            self.logger.info('  %s: %s', name, version)
        return True

    async def _restore(self) -> bool:
        packages = self._read_consumers(self.pending)
        for consumer, document in packages.items():
            self.logger.info('Restoring %s...', consumer)
            for target in self.pending:
                if target.consumer != consumer:
                    continue
                if target.package in self.versions:
                    document.set_dependency(
                        target.section,
                        target.package,
                        self.versions[target.package],
                    )
                else:
                    document.remove_dependency(target.section, target.package)
            directory = self._directory(consumer)
            package_json.write_package(directory, document)
            (await self.package_manager.install(directory)).check()
        self.logger.info('All packages restored to registry versions!')
        self.logger.info('Ready for git commit/push.')
        return True

    # File mode

    def _file_spec(self, target: models.LinkTarget) -> str:
        package = self.configuration.package(target.package)
        relative = os.path.relpath(
            self._directory(package.directory),
            self._directory(target.consumer),
        )
        return f'file:{pathlib.PurePath(relative).as_posix()}'

    def _link_local_steps(self) -> list[steps.Step]:
        names = dict.fromkeys(
            target.package for target in self.configuration.file_links
        )
        packages = [self.configuration.package(name) for name in names]
        return [
            steps.Step(
                name='build', run=lambda: self._build_packages(packages)
            ),
            steps.Step(name='link', run=self._link_files),
        ]

    async def _link_files(self) -> bool:
        for consumer in self.configuration.consumers(
            self.configuration.file_links
        ):
            targets = [
                target
                for target in self.configuration.file_links
                if target.consumer == consumer
            ]
            directory = self._directory(consumer)
            document = package_json.read_package(directory)
            if all(
                document.dependency(target.section, target.package)
                == self._file_spec(target)
                for target in targets
            ):
                self.logger.info('%s is already linked', consumer)
                continue

            self.logger.info('Linking %s to local packages...', consumer)
            backup = directory / self.configuration.backup_file
            if not backup.exists():
                package_json.write_json(
                    backup,
                    document.sections(target.section for target in targets),
                )
            for target in targets:
                document.set_dependency(
                    target.section, target.package, self._file_spec(target)
                )
            package_json.write_package(directory, document)
            (await self.package_manager.install(directory)).check()
            self.logger.info('%s linked', consumer)
        self.logger.info('All packages linked for local development!')
        self.logger.info(
            'To restore registry versions before committing run: '
            'sandstone-workspace unlink --local'
        )
        return True

    def _unlink_local_steps(self) -> list[steps.Step]:
        return [steps.Step(name='restore', run=self._restore_files)]

    async def _restore_files(self) -> bool:
        for consumer in self.configuration.consumers(
            self.configuration.file_links
        ):
            directory = self._directory(consumer)
            backup = directory / self.configuration.backup_file
            if not backup.exists():
                self.logger.info('%s was not linked, skipping', consumer)
                continue
            self.logger.info('Restoring %s...', consumer)
            saved = package_json.read_json(backup)
            if not isinstance(saved, dict):
                raise errors.ManifestError(f'Invalid backup file: {backup}')
            document = package_json.read_package(directory)
            document.restore_sections(saved)
            package_json.write_package(directory, document)
            backup.unlink()
            (await self.package_manager.install(directory)).check()
            self.logger.info('%s restored', consumer)
        self.logger.info('All packages restored to registry versions!')
        self.logger.info('Ready for git commit/push.')
        return True
