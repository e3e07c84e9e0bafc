"""Command controller for workspace automation.

Maps the parsed command line onto the action that implements it and
reports the overall outcome.
"""

import argparse
import enum
import logging

from sandstone_workspace import actions, mixins, models, versions

LOGGER = logging.getLogger(__name__)


class Command(enum.StrEnum):
    """Sub-commands accepted on the command line."""

    setup = 'setup'
    link = 'link'
    unlink = 'unlink'
    template = 'template'


class Controller(mixins.LoggerMixin):
    """Runs a single workspace command."""

    def __init__(
        self, args: argparse.Namespace, config: models.Configuration
    ) -> None:
        super().__init__(args.verbose)
        self.args = args
        self.configuration = config
        self.logger = LOGGER

    @property
    def command(self) -> Command:
        try:
            return Command(self.args.command)
        except ValueError:
            raise ValueError(
                f'Unsupported command: {self.args.command}'
            ) from None

    async def run(self) -> bool:
        self.logger.debug(
            'Running %s in %s', self.command, self.configuration.root_dir
        )
        match self.command:
            case Command.setup:
                result = await actions.SetupActions(
                    self.configuration, self.verbose
                ).execute(self.args.org, self.args.skip, self.args.only)
            case Command.link | Command.unlink:
                result = await actions.LinkActions(
                    self.configuration, self.verbose
                ).execute(actions.LinkCommand(self.command), self.args.local)
            case Command.template:
                template_type = (
                    versions.TemplateType.library
                    if self.args.library
                    else versions.TemplateType.pack
                )
                result = await actions.TemplateActions(
                    self.configuration, self.verbose
                ).execute(template_type)
        self._log_verbose_info(
            '%s finished: %s',
            self.command,
            ', '.join(
                f'{name}={outcome}'
                for name, outcome in result.outcomes.items()
            ),
        )
        return result.success
