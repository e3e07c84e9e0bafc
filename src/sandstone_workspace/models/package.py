"""package.json model.

The document is kept as an ordered mapping so that rewriting it only
touches the dependency entries that were changed.
"""

import typing

import pydantic

from sandstone_workspace.models import configuration

LINK_PROTOCOLS = ('link:', 'file:')


def is_linked(version: str | None) -> bool:
    """Return True for dependency specs that point at a local package."""
    return bool(version) and version.startswith(LINK_PROTOCOLS)


class PackageJson(pydantic.RootModel[dict[str, typing.Any]]):
    """A package.json document."""

    @pydantic.field_validator('root')
    @classmethod
    def _validate_sections(
        cls, value: dict[str, typing.Any]
    ) -> dict[str, typing.Any]:
        for section in configuration.DependencySection:
            if section in value and not isinstance(value[section], dict):
                raise ValueError(f'{section} must be an object')
        return value

    def dependency(
        self, section: configuration.DependencySection, package: str
    ) -> str | None:
        return self.root.get(section, {}).get(package)

    def is_linked(
        self, section: configuration.DependencySection, package: str
    ) -> bool:
        return is_linked(self.dependency(section, package))

    def set_dependency(
        self,
        section: configuration.DependencySection,
        package: str,
        version: str,
    ) -> None:
        self.root.setdefault(str(section), {})[package] = version

    def remove_dependency(
        self, section: configuration.DependencySection, package: str
    ) -> None:
        self.root.get(section, {}).pop(package, None)

    def sections(
        self, sections: typing.Iterable[configuration.DependencySection]
    ) -> dict[str, dict[str, str]]:
        """Return a copy of the named dependency sections."""
        return {
            str(section): dict(self.root.get(section, {}))
            for section in sections
        }

    def restore_sections(self, backup: dict[str, dict[str, str]]) -> None:
        """Replace dependency sections with previously saved copies.

        Sections that were empty when saved are removed again.

        """
        for section, values in backup.items():
            if values:
                self.root[section] = values
            else:
                self.root.pop(section, None)
