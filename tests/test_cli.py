"""Tests for the command line interface and controller."""

import argparse
import pathlib
import tempfile
import unittest
from unittest import mock

from sandstone_workspace import cli, controller, errors, models, versions
from tests import base


class ParseArgsTestCase(unittest.TestCase):
    """Test cases for argument parsing."""

    def test_setup_arguments(self) -> None:
        args = cli.parse_args(
            ['setup', '--org', 'someone', '--skip', 'docs, playground']
        )
        self.assertEqual(args.command, 'setup')
        self.assertEqual(args.org, 'someone')
        self.assertEqual(args.skip, ['docs', 'playground'])
        self.assertIsNone(args.only)
        self.assertFalse(args.verbose)

    def test_skip_and_only_together(self) -> None:
        args = cli.parse_args(['setup', '--skip', 'a', '--only', 'b,c'])
        self.assertEqual(args.skip, ['a'])
        self.assertEqual(args.only, ['b', 'c'])

    def test_link_local(self) -> None:
        args = cli.parse_args(['-v', 'unlink', '--local'])
        self.assertEqual(args.command, 'unlink')
        self.assertTrue(args.local)
        self.assertTrue(args.verbose)

    def test_template_library(self) -> None:
        args = cli.parse_args(['template', '--library'])
        self.assertTrue(args.library)

    def test_command_is_required(self) -> None:
        with self.assertRaises(SystemExit):
            cli.parse_args([])


class LoadConfigurationTestCase(unittest.TestCase):
    """Test cases for configuration discovery."""

    def test_config_file_in_root_is_used(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = pathlib.Path(temp_dir)
            (root / cli.CONFIG_FILE).write_text('default_org = "fork"\n')
            args = cli.parse_args(['--root', temp_dir, 'template'])
            config = cli.load_configuration(args)
        self.assertEqual(config.default_org, 'fork')
        self.assertEqual(config.root_dir, root.resolve())

    def test_defaults_without_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            args = cli.parse_args(['--root', temp_dir, 'template'])
            config = cli.load_configuration(args)
        self.assertEqual(config.template_dir, 'sandstone-template')


class MainTestCase(unittest.TestCase):
    """Test cases for the main entry point."""

    def setUp(self) -> None:
        self.temp_dir = self.enterContext(tempfile.TemporaryDirectory())

    @mock.patch('sandstone_workspace.controller.Controller.run')
    def test_success_exit_code(self, run: mock.AsyncMock) -> None:
        run.return_value = True
        self.assertEqual(
            cli.main(['--root', self.temp_dir, 'template']), 0
        )

    @mock.patch('sandstone_workspace.controller.Controller.run')
    def test_failure_exit_code(self, run: mock.AsyncMock) -> None:
        run.return_value = False
        self.assertEqual(cli.main(['--root', self.temp_dir, 'link']), 1)

    @mock.patch('sandstone_workspace.controller.Controller.run')
    def test_workspace_error_exit_code(self, run: mock.AsyncMock) -> None:
        run.side_effect = errors.ManifestError('Missing file: manifest.json')
        self.assertEqual(cli.main(['--root', self.temp_dir, 'setup']), 1)

    def test_invalid_configuration_exit_code(self) -> None:
        config = pathlib.Path(self.temp_dir) / 'broken.toml'
        config.write_text('registry = 1\n')
        self.assertEqual(
            cli.main(
                ['--root', self.temp_dir, '--config', str(config), 'link']
            ),
            1,
        )


class ControllerTestCase(base.AsyncTestCase):
    """Test cases for command dispatch."""

    def setUp(self) -> None:
        super().setUp()
        self.configuration = models.Configuration(
            root_dir=pathlib.Path('/work')
        )
        self.result = models.StepResult(
            outcomes={'select': models.StepOutcome.completed}
        )

    def _args(self, command: str, **kwargs: object) -> argparse.Namespace:
        return argparse.Namespace(command=command, verbose=False, **kwargs)

    @mock.patch('sandstone_workspace.actions.TemplateActions.execute')
    async def test_template_dispatch(self, execute: mock.AsyncMock) -> None:
        execute.return_value = self.result
        automation = controller.Controller(
            self._args('template', library=True), self.configuration
        )
        self.assertTrue(await automation.run())
        execute.assert_awaited_once_with(versions.TemplateType.library)

    @mock.patch('sandstone_workspace.actions.LinkActions.execute')
    async def test_unlink_dispatch(self, execute: mock.AsyncMock) -> None:
        execute.return_value = self.result
        automation = controller.Controller(
            self._args('unlink', local=True), self.configuration
        )
        await automation.run()
        execute.assert_awaited_once_with(
            controller.actions.LinkCommand.unlink, True
        )

    @mock.patch('sandstone_workspace.actions.SetupActions.execute')
    async def test_setup_dispatch_reports_failure(
        self, execute: mock.AsyncMock
    ) -> None:
        execute.return_value = models.StepResult(
            outcomes={'verify': models.StepOutcome.failed}
        )
        automation = controller.Controller(
            self._args('setup', org=None, skip=['docs'], only=None),
            self.configuration,
        )
        self.assertFalse(await automation.run())
        execute.assert_awaited_once_with(None, ['docs'], None)

    def test_unknown_command(self) -> None:
        automation = controller.Controller(
            self._args('deploy'), self.configuration
        )
        with self.assertRaises(ValueError):
            _ = automation.command
