"""Configuration models with Pydantic validation.

Describes the workspace layout: where repositories live, which local
packages can be linked into which consumers, and how to reach the package
manager, git host and package registry. Defaults reproduce the Sandstone
workspace so that a configuration file is only needed to deviate from it.
"""

import enum
import os
import pathlib
import tomllib
import typing

import pydantic

from sandstone_workspace import errors

DEFAULT_ORG = 'sandstone-mc'


class DependencySection(enum.StrEnum):
    """package.json sections holding dependency specifications."""

    dependencies = 'dependencies'
    dev_dependencies = 'devDependencies'
    peer_dependencies = 'peerDependencies'


class LocalPackage(pydantic.BaseModel):
    """A package developed in the workspace that consumers can link.

    ``build_output`` is the directory, relative to ``directory``, whose
    presence means the package has already been built. Packages that are
    not ``published`` are removed from consumers on unlink instead of being
    restored to a registry version.
    """

    name: str
    directory: pathlib.Path
    build_output: str = 'dist'
    published: bool = True


class LinkTarget(pydantic.BaseModel):
    """A dependency of a consumer that points at a local package."""

    consumer: pathlib.Path
    section: DependencySection
    package: str


class PackageManagerConfiguration(pydantic.BaseModel):
    """Package manager used to build, link and install packages."""

    executable: str = 'bun'
    lock_file: str = 'bun.lock'
    trust_dependencies: bool = True


class RegistryConfiguration(pydantic.BaseModel):
    """Package registry queried for published versions."""

    url: pydantic.HttpUrl = pydantic.Field(
        default='https://registry.npmjs.org', validate_default=True
    )
    timeout: float = 30.0


def _default_packages() -> list[LocalPackage]:
    return [
        LocalPackage(name='sandstone', directory=pathlib.Path('sandstone')),
        LocalPackage(
            name='sandstone-cli',
            directory=pathlib.Path('sandstone-cli'),
            build_output='lib',
        ),
        LocalPackage(
            name='@sandstone-mc/hot-hook',
            directory=pathlib.Path('hot-hook/packages/hot_hook'),
            build_output='build',
            published=False,
        ),
    ]


def _default_links() -> list[LinkTarget]:
    return [
        LinkTarget(
            consumer=pathlib.Path('sandstone-cli'),
            section=DependencySection.dev_dependencies,
            package='sandstone',
        ),
        LinkTarget(
            consumer=pathlib.Path('sandstone-cli'),
            section=DependencySection.dependencies,
            package='@sandstone-mc/hot-hook',
        ),
        LinkTarget(
            consumer=pathlib.Path('sandstone-template'),
            section=DependencySection.dependencies,
            package='sandstone',
        ),
        LinkTarget(
            consumer=pathlib.Path('sandstone-template'),
            section=DependencySection.dev_dependencies,
            package='sandstone-cli',
        ),
    ]


def _default_file_links() -> list[LinkTarget]:
    return [
        LinkTarget(
            consumer=pathlib.Path('sandstone-cli'),
            section=DependencySection.peer_dependencies,
            package='sandstone',
        ),
        LinkTarget(
            consumer=pathlib.Path('sandstone-template'),
            section=DependencySection.dependencies,
            package='sandstone',
        ),
        LinkTarget(
            consumer=pathlib.Path('sandstone-template'),
            section=DependencySection.dev_dependencies,
            package='sandstone-cli',
        ),
    ]


class Configuration(pydantic.BaseModel):
    """Main application configuration.

    Passed explicitly to every action and helper; nothing reads workspace
    settings from module state.
    """

    root_dir: pathlib.Path = pydantic.Field(default_factory=pathlib.Path.cwd)
    default_org: str = DEFAULT_ORG
    git_host: str = 'https://github.com'
    remote: str = 'origin'
    manifest_file: str = 'manifest.json'
    contribute_file: str = 'manifest.contribute.json'
    always_pull: set[str] = pydantic.Field(
        default_factory=lambda: {'template'}
    )
    main_branches: set[str] = pydantic.Field(
        default_factory=lambda: {'main', 'master'}
    )
    template_dir: str = 'sandstone-template'
    backup_file: str = '.link-original.json'
    package_manager: PackageManagerConfiguration = pydantic.Field(
        default_factory=PackageManagerConfiguration
    )
    registry: RegistryConfiguration = pydantic.Field(
        default_factory=RegistryConfiguration
    )
    packages: list[LocalPackage] = pydantic.Field(
        default_factory=_default_packages
    )
    links: list[LinkTarget] = pydantic.Field(default_factory=_default_links)
    file_links: list[LinkTarget] = pydantic.Field(
        default_factory=_default_file_links
    )

    @pydantic.model_validator(mode='before')
    @classmethod
    def _set_default_org_from_env(cls, data: typing.Any) -> typing.Any:
        if isinstance(data, dict) and 'default_org' not in data:
            env_org = os.environ.get('SANDSTONE_ORG')
            if env_org:
                data['default_org'] = env_org
        return data

    @pydantic.model_validator(mode='after')
    def _validate_link_packages(self) -> typing.Self:
        known = {package.name for package in self.packages}
        for target in [*self.links, *self.file_links]:
            if target.package not in known:
                raise ValueError(
                    f'Link target {target.consumer}/{target.section} refers '
                    f'to unknown package {target.package!r}'
                )
        return self

    def path(self, *parts: str | pathlib.Path) -> pathlib.Path:
        """Return a path inside the workspace root."""
        return self.root_dir.joinpath(*parts)

    @property
    def template_path(self) -> pathlib.Path:
        return self.path(self.template_dir)

    def package(self, name: str) -> LocalPackage:
        """Return the local package with the given name."""
        for package in self.packages:
            if package.name == name:
                return package
        raise KeyError(name)

    def consumers(self, targets: list[LinkTarget]) -> list[pathlib.Path]:
        """Return the distinct consumer directories in declaration order."""
        return list(dict.fromkeys(target.consumer for target in targets))

    @classmethod
    def load(
        cls, path: pathlib.Path | None, **overrides: typing.Any
    ) -> 'Configuration':
        """Load configuration from a TOML file, applying overrides.

        A missing ``path`` yields the default configuration.

        Raises:
            errors.ConfigurationError: If the file cannot be read or parsed

        """
        data: dict[str, typing.Any] = {}
        if path is not None:
            try:
                with path.open('rb') as handle:
                    data = tomllib.load(handle)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                raise errors.ConfigurationError(
                    f'Failed to load configuration from {path}: {exc}'
                ) from exc
        data.update(
            {key: value for key, value in overrides.items() if value}
        )
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as exc:
            raise errors.ConfigurationError(
                f'Invalid configuration in {path or "defaults"}: {exc}'
            ) from exc
