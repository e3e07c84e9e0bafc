"""Shared behaviours for action classes."""

import logging
import typing


class LoggerMixin:
    """Provides a per-class logger with verbose-aware info logging."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.logger = logging.getLogger(
            f'sandstone_workspace.{self.__class__.__name__}'
        )

    def _set_command_logger(self, command: str) -> None:
        """Scope the logger to the command being executed."""
        self.logger = logging.getLogger(f'sandstone_workspace.{command}')

    def _log_verbose_info(self, message: str, *args: typing.Any) -> None:
        """Log at INFO when verbose, otherwise at DEBUG."""
        if self.verbose:
            self.logger.info(message, *args)
        else:
            self.logger.debug(message, *args)
