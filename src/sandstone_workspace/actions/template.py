"""Template repository operations."""

from sandstone_workspace import (
    errors,
    git,
    mixins,
    models,
    package_manager,
    steps,
    versions,
)


class TemplateActions(mixins.LoggerMixin):
    """Checks out the latest release-line branch of the template repository.

    Branches are named ``<type>-<version>`` (``pack-1.2.0``,
    ``library-2.0.0-beta.1``); the highest version for the requested
    template type wins.
    """

    def __init__(
        self, configuration: models.Configuration, verbose: bool = False
    ) -> None:
        super().__init__(verbose)
        self._set_command_logger('template')
        self.configuration = configuration
        self.package_manager = package_manager.PackageManager(
            configuration.package_manager
        )
        self.repository = configuration.template_path
        self.target_branch: str | None = None

    async def execute(
        self, template_type: versions.TemplateType = versions.TemplateType.pack
    ) -> models.StepResult:
        self.target_branch = None
        runner = steps.StepRunner(self.verbose)
        result = await runner.execute(
            [
                steps.Step(name='verify', run=self._verify_repository),
                steps.Step(name='fetch', run=self._fetch),
                steps.Step(
                    name='select',
                    run=lambda: self._select_branch(template_type),
                ),
                steps.Step(
                    name='checkout',
                    run=self._checkout,
                    guard=steps.after('select'),
                ),
                steps.Step(name='install', run=self._install),
            ]
        )
        if result.success:
            self.logger.info('Ready!')
        return result

    async def _verify_repository(self) -> bool:
        if not self.repository.exists():
            raise errors.WorkspaceError(
                f'{self.configuration.template_dir} not found. '
                'Run `sandstone-workspace setup` first.'
            )
        return True

    async def _fetch(self) -> bool:
        self.logger.info('Fetching branches...')
        result = await git.fetch(self.repository)
        if not result.ok:
            self.logger.warning(
                'Failed to fetch branches: %s', result.stderr.strip()
            )
        return True

    async def _select_branch(
        self, template_type: versions.TemplateType
    ) -> models.StepOutcome:
        """Pick the target branch.

        Reports the step as skipped when the target is already checked out.

        """
        branches = await git.get_remote_branches(
            self.repository, self.configuration.remote
        )
        self._log_verbose_info(
            'Found %d remote branches: %s', len(branches), ', '.join(branches)
        )
        self.target_branch = versions.find_latest_branch(
            branches, template_type
        )
        if not self.target_branch:
            raise errors.WorkspaceError(
                f'No {template_type}-* branches found.'
            )
        current = await git.get_current_branch(self.repository)
        if current == self.target_branch:
            self.logger.info('Branch: %s (current)', self.target_branch)
            return models.StepOutcome.skipped
        self._log_verbose_info(
            'Switching from %s to %s', current, self.target_branch
        )
        return models.StepOutcome.completed

    async def _checkout(self) -> bool:
        self.logger.info('Cleaning working directory...')
        await git.reset_hard(self.repository)
        await git.clean(self.repository)

        self.logger.info('Checking out %s...', self.target_branch)
        result = await git.checkout(self.repository, self.target_branch)
        result.check()
        self.logger.info('Branch: %s', self.target_branch)
        return True

    async def _install(self) -> models.StepOutcome:
        if not self.package_manager.needs_install(self.repository):
            return models.StepOutcome.skipped
        self.logger.info('Installing dependencies...')
        result = await self.package_manager.install(self.repository)
        if not result.ok:
            return models.StepOutcome.failed
        return models.StepOutcome.completed
