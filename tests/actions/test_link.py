"""Tests for the link action module."""

import json
import pathlib
import typing
from unittest import mock

from sandstone_workspace import errors, models, utils
from sandstone_workspace.actions import link
from tests import base


def _result(returncode: int = 0) -> utils.CommandResult:
    return utils.CommandResult(command=['bun'], returncode=returncode)


class LinkTestBase(base.WorkspaceTestCase):
    """Creates a workspace with the default packages and consumers."""

    def setUp(self) -> None:
        super().setUp()
        self.sandstone = self.root / 'sandstone'
        self.cli = self.root / 'sandstone-cli'
        self.template = self.root / 'sandstone-template'
        self.hot_hook = self.root / 'hot-hook' / 'packages' / 'hot_hook'
        for directory in (self.sandstone, self.hot_hook):
            directory.mkdir(parents=True)
        self._write(self.sandstone, {'name': 'sandstone'})
        self._write(
            self.cli,
            {
                'name': 'sandstone-cli',
                'version': '1.0.0',
                'dependencies': {'@sandstone-mc/hot-hook': '^0.0.1'},
                'devDependencies': {'sandstone': '^1.0.0'},
                'peerDependencies': {'sandstone': '>=1.0.0'},
            },
        )
        self._write(
            self.template,
            {
                'name': 'sandstone-template',
                'dependencies': {'sandstone': '^1.0.0'},
                'devDependencies': {'sandstone-cli': '^1.0.0'},
            },
        )
        self.pm = {
            'build': mock.AsyncMock(return_value=_result()),
            'register': mock.AsyncMock(return_value=_result()),
            'unregister': mock.AsyncMock(return_value=_result()),
            'link': mock.AsyncMock(return_value=_result()),
            'install': mock.AsyncMock(return_value=_result()),
        }
        mock.patch.multiple(
            'sandstone_workspace.package_manager.PackageManager', **self.pm
        ).start()
        self.addCleanup(mock.patch.stopall)
        self.actions = link.LinkActions(self.configuration, verbose=True)

    @staticmethod
    def _write(directory: pathlib.Path, data: dict) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / 'package.json').write_text(json.dumps(data, indent=2))

    @staticmethod
    def _read(directory: pathlib.Path, name: str = 'package.json') -> dict:
        return json.loads((directory / name).read_text())

    def _link_all(self) -> None:
        cli = self._read(self.cli)
        cli['devDependencies']['sandstone'] = 'link:sandstone'
        cli['dependencies']['@sandstone-mc/hot-hook'] = (
            'link:@sandstone-mc/hot-hook'
        )
        self._write(self.cli, cli)
        template = self._read(self.template)
        template['dependencies']['sandstone'] = 'link:sandstone'
        template['devDependencies']['sandstone-cli'] = 'link:sandstone-cli'
        self._write(self.template, template)


class LinkTestCase(LinkTestBase):
    """Test cases for package manager link registration."""

    async def test_builds_registers_and_links(self) -> None:
        (self.cli / 'lib').mkdir()
        result = await self.actions.execute(link.LinkCommand.link)
        self.assertTrue(result.success)
        self.assertEqual(
            [call.args[0] for call in self.pm['build'].await_args_list],
            [self.sandstone, self.hot_hook],
        )
        self.assertEqual(
            [call.args[0] for call in self.pm['register'].await_args_list],
            [self.sandstone, self.cli, self.hot_hook],
        )
        self.assertEqual(
            [call.args for call in self.pm['link'].await_args_list],
            [
                (self.cli, 'sandstone'),
                (self.cli, '@sandstone-mc/hot-hook'),
                (self.template, 'sandstone'),
                (self.template, 'sandstone-cli'),
            ],
        )

    async def test_only_unlinked_targets_are_linked(self) -> None:
        template = self._read(self.template)
        template['dependencies']['sandstone'] = 'link:sandstone'
        self._write(self.template, template)
        await self.actions.execute(link.LinkCommand.link)
        self.assertNotIn(
            mock.call(self.template, 'sandstone'),
            self.pm['link'].await_args_list,
        )
        self.assertIn(
            mock.call(self.template, 'sandstone-cli'),
            self.pm['link'].await_args_list,
        )

    async def test_already_linked_is_a_no_op(self) -> None:
        self._link_all()
        result = await self.actions.execute(link.LinkCommand.link)
        self.assertTrue(result.success)
        self.assertEqual(
            result.outcomes,
            {
                'inspect': models.StepOutcome.skipped,
                'build': models.StepOutcome.skipped,
                'register': models.StepOutcome.skipped,
                'link': models.StepOutcome.skipped,
            },
        )
        self.pm['register'].assert_not_awaited()
        self.pm['link'].assert_not_awaited()

    async def test_build_failure_stops_linking(self) -> None:
        self.pm['build'].return_value = _result(1)
        result = await self.actions.execute(link.LinkCommand.link)
        self.assertFalse(result.success)
        self.assertEqual(self.pm['build'].await_count, 1)
        self.pm['register'].assert_not_awaited()

    async def test_missing_package_json_fails(self) -> None:
        (self.template / 'package.json').unlink()
        result = await self.actions.execute(link.LinkCommand.link)
        self.assertFalse(result.success)
        self.assertIn('package.json', result.error)


class UnlinkTestCase(LinkTestBase):
    """Test cases for restoring registry versions."""

    def setUp(self) -> None:
        super().setUp()
        self.registry = mock.patch(
            'sandstone_workspace.registry.Registry.get_caret_ranges',
            new_callable=mock.AsyncMock,
        ).start()
        self.registry.side_effect = self._caret_ranges

    async def _caret_ranges(
        self, packages: typing.Iterable[str]
    ) -> dict[str, str]:
        known = {'sandstone': '^1.5.0', 'sandstone-cli': '^2.1.0'}
        return {package: known[package] for package in packages}

    async def test_restores_registry_versions(self) -> None:
        self._link_all()
        result = await self.actions.execute(link.LinkCommand.unlink)
        self.assertTrue(result.success)
        self.assertEqual(self.pm['unregister'].await_count, 3)
        cli = self._read(self.cli)
        self.assertEqual(cli['devDependencies']['sandstone'], '^1.5.0')
        self.assertNotIn('@sandstone-mc/hot-hook', cli['dependencies'])
        template = self._read(self.template)
        self.assertEqual(template['dependencies']['sandstone'], '^1.5.0')
        self.assertEqual(
            template['devDependencies']['sandstone-cli'], '^2.1.0'
        )
        self.assertEqual(
            [call.args[0] for call in self.pm['install'].await_args_list],
            [self.cli, self.template],
        )

    async def test_only_linked_consumers_are_rewritten(self) -> None:
        cli = self._read(self.cli)
        cli['devDependencies']['sandstone'] = 'file:../sandstone'
        self._write(self.cli, cli)
        before = (self.template / 'package.json').read_text()
        await self.actions.execute(link.LinkCommand.unlink)
        self.assertEqual((self.template / 'package.json').read_text(), before)
        self.pm['install'].assert_awaited_once_with(self.cli)
        self.registry.assert_awaited_once_with(['sandstone'])

    async def test_written_package_json_format(self) -> None:
        self._link_all()
        await self.actions.execute(link.LinkCommand.unlink)
        content = (self.template / 'package.json').read_text()
        self.assertTrue(content.endswith('}\n'))
        self.assertIn('\n  "name": "sandstone-template",\n', content)

    async def test_already_unlinked_is_a_no_op(self) -> None:
        result = await self.actions.execute(link.LinkCommand.unlink)
        self.assertTrue(result.success)
        self.assertEqual(
            result.outcomes['inspect'], models.StepOutcome.skipped
        )
        self.assertEqual(
            result.outcomes['restore'], models.StepOutcome.skipped
        )
        self.pm['unregister'].assert_not_awaited()
        self.registry.assert_not_awaited()

    async def test_unregister_failures_are_ignored(self) -> None:
        self._link_all()
        self.pm['unregister'].return_value = _result(1)
        result = await self.actions.execute(link.LinkCommand.unlink)
        self.assertTrue(result.success)

    async def test_registry_failure_leaves_package_json(self) -> None:
        self._link_all()
        self.registry.side_effect = errors.RegistryError(
            'sandstone', 'Not Found'
        )
        before = self._read(self.template)
        result = await self.actions.execute(link.LinkCommand.unlink)
        self.assertFalse(result.success)
        self.assertEqual(self._read(self.template), before)
        self.pm['install'].assert_not_awaited()


class LocalLinkTestCase(LinkTestBase):
    """Test cases for file: reference linking."""

    async def test_link_local_writes_file_references(self) -> None:
        result = await self.actions.execute(link.LinkCommand.link, local=True)
        self.assertTrue(result.success)

        cli = self._read(self.cli)
        self.assertEqual(
            cli['peerDependencies']['sandstone'], 'file:../sandstone'
        )
        self.assertEqual(cli['devDependencies']['sandstone'], '^1.0.0')
        self.assertEqual(
            self._read(self.cli, '.link-original.json'),
            {'peerDependencies': {'sandstone': '>=1.0.0'}},
        )

        template = self._read(self.template)
        self.assertEqual(
            template['dependencies']['sandstone'], 'file:../sandstone'
        )
        self.assertEqual(
            template['devDependencies']['sandstone-cli'],
            'file:../sandstone-cli',
        )
        self.assertEqual(
            self._read(self.template, '.link-original.json'),
            {
                'dependencies': {'sandstone': '^1.0.0'},
                'devDependencies': {'sandstone-cli': '^1.0.0'},
            },
        )
        self.assertEqual(
            [call.args[0] for call in self.pm['build'].await_args_list],
            [self.sandstone, self.cli],
        )
        self.assertEqual(self.pm['install'].await_count, 2)

    async def test_link_local_twice_keeps_original_backup(self) -> None:
        await self.actions.execute(link.LinkCommand.link, local=True)
        template = self._read(self.template)
        template['devDependencies']['sandstone-cli'] = '^9.0.0'
        self._write(self.template, template)

        await self.actions.execute(link.LinkCommand.link, local=True)
        self.assertEqual(
            self._read(self.template, '.link-original.json')[
                'devDependencies'
            ],
            {'sandstone-cli': '^1.0.0'},
        )

    async def test_link_local_skips_linked_consumers(self) -> None:
        await self.actions.execute(link.LinkCommand.link, local=True)
        self.pm['install'].reset_mock()
        await self.actions.execute(link.LinkCommand.link, local=True)
        self.pm['install'].assert_not_awaited()

    async def test_unlink_local_restores_backup(self) -> None:
        original_cli = self._read(self.cli)
        original_template = self._read(self.template)
        await self.actions.execute(link.LinkCommand.link, local=True)

        result = await self.actions.execute(
            link.LinkCommand.unlink, local=True
        )
        self.assertTrue(result.success)
        self.assertEqual(self._read(self.cli), original_cli)
        self.assertEqual(self._read(self.template), original_template)
        self.assertFalse((self.cli / '.link-original.json').exists())
        self.assertFalse((self.template / '.link-original.json').exists())

    async def test_unlink_local_without_backup_skips(self) -> None:
        before = self._read(self.template)
        result = await self.actions.execute(
            link.LinkCommand.unlink, local=True
        )
        self.assertTrue(result.success)
        self.assertEqual(self._read(self.template), before)
        self.pm['install'].assert_not_awaited()

    async def test_unlink_local_rejects_invalid_backup(self) -> None:
        (self.cli / '.link-original.json').write_text('[]')
        result = await self.actions.execute(
            link.LinkCommand.unlink, local=True
        )
        self.assertFalse(result.success)
        self.assertIn('Invalid backup file', result.error)
