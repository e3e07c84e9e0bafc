"""Workspace manifest models.

``manifest.json`` lists the repositories of the workspace (short name to
folder name). ``manifest.contribute.json`` is the per-developer override
naming the git user to clone from and the repositories to skip or limit
the workspace to.
"""

import pydantic

from sandstone_workspace.models import configuration


class Manifest(pydantic.RootModel[dict[str, str]]):
    """Repository short names mapped to their folder names."""

    def repositories(self) -> list[tuple[str, str]]:
        return list(self.root.items())


class ContributeManifest(pydantic.BaseModel):
    """Per-developer workspace overrides."""

    model_config = pydantic.ConfigDict(populate_by_name=True)

    git_user: str = pydantic.Field(
        default=configuration.DEFAULT_ORG, alias='git-user'
    )
    skip_repos: list[str] = pydantic.Field(
        default_factory=list, alias='skip-repos'
    )
    only_repos: list[str] | None = pydantic.Field(
        default=None, alias='only-repos'
    )

    def includes(self, short_name: str) -> bool:
        """Return whether the repository is part of this workspace."""
        if self.only_repos:
            return short_name in self.only_repos
        return short_name not in self.skip_repos

    def apply(
        self,
        org: str | None = None,
        skip: list[str] | None = None,
        only: list[str] | None = None,
    ) -> bool:
        """Apply command line overrides, returning True if anything changed.

        ``skip`` replaces the skip list and drops any ``only`` list; ``only``
        replaces the only list and clears the skip list.

        """
        modified = False
        if org and org != self.git_user:
            self.git_user = org
            modified = True
        if skip is not None:
            self.skip_repos = skip
            self.only_repos = None
            modified = True
        if only is not None:
            self.only_repos = only
            self.skip_repos = []
            modified = True
        return modified

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
