"""Workspace setup operations."""

import pathlib

from sandstone_workspace import (
    git,
    mixins,
    models,
    package_json,
    package_manager,
    steps,
)


class SetupActions(mixins.LoggerMixin):
    """Clones or updates the workspace repositories.

    Repositories come from ``manifest.json``; ``manifest.contribute.json``
    selects the git user to clone from and which repositories to include.
    Existing clones are only pulled when they track the upstream
    organisation's main branch, so work on forks and feature branches is
    left alone.
    """

    def __init__(
        self, configuration: models.Configuration, verbose: bool = False
    ) -> None:
        super().__init__(verbose)
        self._set_command_logger('setup')
        self.configuration = configuration
        self.package_manager = package_manager.PackageManager(
            configuration.package_manager
        )
        self.contribute = models.ContributeManifest(
            git_user=configuration.default_org
        )
        self.repositories: list[tuple[str, str]] = []
        self.failed: list[str] = []

    async def execute(
        self,
        org: str | None = None,
        skip: list[str] | None = None,
        only: list[str] | None = None,
    ) -> models.StepResult:
        self.failed = []
        runner = steps.StepRunner(self.verbose)
        result = await runner.execute(
            [
                steps.Step(
                    name='manifest',
                    run=lambda: self._load_manifests(org, skip, only),
                ),
                steps.Step(name='pull', run=self._pull_root),
                steps.Step(name='repositories', run=self._sync_repositories),
                steps.Step(name='install', run=self._install_dependencies),
                steps.Step(name='verify', run=self._verify),
            ]
        )
        if result.success:
            self.logger.info('Setup complete!')
        return result

    async def _load_manifests(
        self,
        org: str | None,
        skip: list[str] | None,
        only: list[str] | None,
    ) -> bool:
        manifest = package_json.read_manifest(self.configuration)
        self.contribute = package_json.read_contribute_manifest(
            self.configuration
        )
        if self.contribute.apply(org, skip, only):
            package_json.write_contribute_manifest(
                self.configuration, self.contribute
            )
            self.logger.info('Updated %s', self.configuration.contribute_file)

        self.repositories = [
            (short_name, folder)
            for short_name, folder in manifest.repositories()
            if self.contribute.includes(short_name)
        ]
        self._log_verbose_info(
            'Processing %d repositories from %s: %s',
            len(self.repositories),
            self.contribute.git_user,
            ', '.join(name for name, _folder in self.repositories),
        )
        return True

    async def _pull_root(self) -> bool:
        self.logger.info('Pulling latest changes in root...')
        result = await git.pull(self.configuration.root_dir)
        if not result.ok:
            self.logger.warning('Failed to pull the workspace root')
        return True

    def _clone_url(self, folder: str) -> str:
        host = self.configuration.git_host.rstrip('/')
        return f'{host}/{self.contribute.git_user}/{folder}.git'

    async def _should_pull(
        self, short_name: str, directory: pathlib.Path
    ) -> bool:
        if short_name in self.configuration.always_pull:
            return True
        branch = await git.get_current_branch(directory)
        origin = await git.get_origin_url(
            directory, self.configuration.remote
        )
        if (
            branch in self.configuration.main_branches
            and origin
            and f'{self.configuration.default_org}/' in origin
        ):
            return True
        self.logger.info(
            'Skipping pull for %s (branch: %s, not on main or not %s)',
            short_name,
            branch,
            self.configuration.default_org,
        )
        return False

    async def _sync_repositories(self) -> bool:
        for short_name, folder in self.repositories:
            directory = self.configuration.path(folder)
            if directory.exists():
                if await self._should_pull(short_name, directory):
                    self.logger.info('Pulling %s...', short_name)
                    result = await git.pull(directory)
                    if not result.ok:
                        self.logger.warning('Failed to pull %s', short_name)
            else:
                self.logger.info(
                    'Cloning %s from %s...',
                    short_name,
                    self.contribute.git_user,
                )
                result = await git.clone_repository(
                    self._clone_url(folder), directory
                )
                if not result.ok:
                    self.logger.error('Failed to clone %s', short_name)
                    self.failed.append(short_name)
        return True

    async def _install_dependencies(self) -> bool:
        self.logger.info('Installing dependencies...')
        for short_name, folder in self.repositories:
            directory = self.configuration.path(folder)
            if not directory.exists():
                continue
            if self.package_manager.needs_install(directory):
                self.logger.info(
                    'Installing dependencies for %s...', short_name
                )
                result = await self.package_manager.install(directory)
                if not result.ok:
                    self.logger.warning(
                        'Failed to install dependencies for %s', short_name
                    )
        return True

    async def _verify(self) -> bool:
        if self.failed:
            self.logger.error(
                'Failed to clone: %s', ', '.join(self.failed)
            )
            return False
        return True
