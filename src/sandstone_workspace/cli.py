"""Command line interface for sandstone-workspace."""

import argparse
import asyncio
import logging
import pathlib
import sys

import httpx
import pydantic

from sandstone_workspace import controller, errors, models, version

LOGGER = logging.getLogger(__name__)
CONFIG_FILE = 'sandstone-workspace.toml'


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def configure_logging(verbose: bool) -> None:
    """Configure message-only logging on stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        stream=sys.stdout,
        force=True,
    )
    for logger in ('httpcore', 'httpx'):
        logging.getLogger(logger).setLevel(logging.WARNING)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='sandstone-workspace',
        description='Developer workflow automation for the Sandstone '
        'workspace',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        '--root',
        type=pathlib.Path,
        default=pathlib.Path.cwd(),
        help='Workspace root directory',
    )
    parser.add_argument(
        '--config',
        type=pathlib.Path,
        help=f'Configuration file (defaults to {CONFIG_FILE} in the root '
        'when present)',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true', help='Verbose output'
    )
    parser.add_argument(
        '--version', action='version', version=version.__version__
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    setup = subparsers.add_parser(
        'setup', help='Clone or update the workspace repositories'
    )
    setup.add_argument(
        '--org', help=f'Git org/user to clone from ({models.DEFAULT_ORG})'
    )
    setup.add_argument(
        '--skip',
        type=_csv,
        metavar='REPOS',
        help='Skip repositories (comma-separated short names)',
    )
    setup.add_argument(
        '--only',
        type=_csv,
        metavar='REPOS',
        help='Only include repositories, clearing --skip (comma-separated)',
    )

    for name, description in (
        ('link', 'Link local packages for development'),
        ('unlink', 'Restore registry versions of linked packages'),
    ):
        command = subparsers.add_parser(name, help=description)
        command.add_argument(
            '--local',
            action='store_true',
            help='Use file: references with a backup of the original '
            'dependencies instead of package manager links',
        )

    template = subparsers.add_parser(
        'template', help='Check out the latest template branch'
    )
    template.add_argument(
        '--library',
        action='store_true',
        help='Use the library template instead of the pack template',
    )
    return parser.parse_args(args)


def load_configuration(args: argparse.Namespace) -> models.Configuration:
    root = args.root.resolve()
    path = args.config
    if path is None and (root / CONFIG_FILE).exists():
        path = root / CONFIG_FILE
    return models.Configuration.load(path, root_dir=root)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = load_configuration(args)
        automation = controller.Controller(args, config)
        success = asyncio.run(automation.run())
    except KeyboardInterrupt:
        LOGGER.info('Interrupted, exiting')
        return 130
    except (
        errors.WorkspaceError,
        httpx.HTTPError,
        pydantic.ValidationError,
    ) as exc:
        LOGGER.error('Error: %s', exc)
        return 1
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
