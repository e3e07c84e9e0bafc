"""Git operations for workspace repositories.

Thin async wrappers around the ``git`` executable. Query helpers return
``None`` or empty results when git fails; mutating helpers return the
``CommandResult`` so callers decide whether a failure is fatal.
"""

import logging
import pathlib

from sandstone_workspace import utils

LOGGER = logging.getLogger(__name__)


async def run_git(
    repository: pathlib.Path, *args: str, capture: bool = True
) -> utils.CommandResult:
    return await utils.run_command(
        'git', '-C', repository, *args, capture=capture
    )


async def get_origin_url(
    repository: pathlib.Path, remote: str = 'origin'
) -> str | None:
    result = await run_git(repository, 'remote', 'get-url', remote)
    return result.stdout.strip() if result.ok else None


async def get_current_branch(repository: pathlib.Path) -> str | None:
    result = await run_git(repository, 'branch', '--show-current')
    return result.stdout.strip() if result.ok else None


def parse_remote_branches(output: str, remote: str = 'origin') -> list[str]:
    """Parse ``git branch -r`` output into plain branch names.

    Symbolic entries (``origin/HEAD -> origin/main``) are dropped and the
    remote prefix is stripped.

    """
    branches = []
    for line in output.splitlines():
        branch = line.strip()
        if not branch or '->' in branch:
            continue
        branches.append(branch.removeprefix(f'{remote}/'))
    return branches


async def get_remote_branches(
    repository: pathlib.Path, remote: str = 'origin'
) -> list[str]:
    result = await run_git(repository, 'branch', '-r')
    if not result.ok:
        return []
    return parse_remote_branches(result.stdout, remote)


async def fetch(repository: pathlib.Path) -> utils.CommandResult:
    return await run_git(repository, 'fetch', '--prune')


async def pull(repository: pathlib.Path) -> utils.CommandResult:
    return await run_git(repository, 'pull', capture=False)


async def clone_repository(
    url: str, destination: pathlib.Path
) -> utils.CommandResult:
    LOGGER.debug('Cloning %s into %s', url, destination)
    return await utils.run_command(
        'git', 'clone', url, destination, capture=False
    )


async def reset_hard(repository: pathlib.Path) -> utils.CommandResult:
    return await run_git(repository, 'reset', '--hard')


async def clean(repository: pathlib.Path) -> utils.CommandResult:
    """Remove untracked and ignored files."""
    return await run_git(repository, 'clean', '-fdx')


async def checkout(
    repository: pathlib.Path, branch: str
) -> utils.CommandResult:
    return await run_git(repository, 'checkout', branch)
