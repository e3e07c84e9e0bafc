"""Subprocess helpers shared by the git and package manager wrappers."""

import asyncio
import logging
import pathlib

import pydantic

from sandstone_workspace import errors

LOGGER = logging.getLogger(__name__)


class CommandResult(pydantic.BaseModel):
    """Outcome of an external command."""

    command: list[str]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> 'CommandResult':
        """Raise CommandError if the command failed."""
        if not self.ok:
            raise errors.CommandError(
                self.command, self.returncode, self.stderr.strip()
            )
        return self


async def run_command(
    *command: str | pathlib.Path,
    cwd: pathlib.Path | None = None,
    capture: bool = True,
) -> CommandResult:
    """Run a command and collect its output without raising on failure.

    With ``capture`` disabled the command inherits stdout and stderr so its
    progress is visible to the operator.

    Raises:
        errors.CommandError: If the executable cannot be started

    """
    args = [str(arg) for arg in command]
    LOGGER.debug('Running %s in %s', ' '.join(args), cwd or '.')
    stream = asyncio.subprocess.PIPE if capture else None
    try:
        process = await asyncio.create_subprocess_exec(
            *args, cwd=cwd, stdout=stream, stderr=stream
        )
    except OSError as exc:
        raise errors.CommandError(args, 127, str(exc)) from exc
    stdout, stderr = await process.communicate()
    result = CommandResult(
        command=args,
        returncode=process.returncode,
        stdout=stdout.decode('utf-8', errors='replace') if stdout else '',
        stderr=stderr.decode('utf-8', errors='replace') if stderr else '',
    )
    if not result.ok:
        LOGGER.debug(
            '%s exited with %d: %s',
            ' '.join(args),
            result.returncode,
            result.stderr.strip(),
        )
    return result
