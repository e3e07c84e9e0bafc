"""Package registry client for published package versions."""

import asyncio
import logging
import typing
from urllib import parse

import httpx
import semver

from sandstone_workspace import errors, models, version

LOGGER = logging.getLogger(__name__)


class Registry:
    """Queries an npm-compatible registry for the latest published versions.

    Use as an async context manager so the underlying HTTP client is closed.
    """

    def __init__(
        self,
        config: models.RegistryConfiguration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.http_client = httpx.AsyncClient(
            base_url=str(config.url).rstrip('/'),
            headers={
                'Accept': 'application/json',
                'User-Agent': f'sandstone-workspace/{version.__version__}',
            },
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> typing.Self:
        return self

    async def __aexit__(self, *exc_info: typing.Any) -> None:
        await self.http_client.aclose()

    async def get_latest_version(self, package: str) -> semver.Version:
        """Return the version tagged ``latest`` for the package.

        Raises:
            errors.RegistryError: If the registry does not return a valid
                semantic version

        """
        # Scoped names keep the @ but encode the slash
        path = f'/{parse.quote(package, safe="@")}/latest'
        try:
            response = await self.http_client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise errors.RegistryError(
                package, exc.response.reason_phrase or str(exc)
            ) from exc
        except httpx.HTTPError as exc:
            raise errors.RegistryError(package, str(exc)) from exc
        try:
            value = response.json()['version']
            return semver.Version.parse(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise errors.RegistryError(
                package, f'invalid version in response: {exc}'
            ) from exc

    async def get_caret_range(self, package: str) -> str:
        """Return ``^<latest>`` for use as a dependency specification."""
        latest = await self.get_latest_version(package)
        LOGGER.debug('Latest version of %s is %s', package, latest)
        return f'^{latest}'

    async def get_caret_ranges(
        self, packages: typing.Iterable[str]
    ) -> dict[str, str]:
        """Fetch caret ranges for several packages concurrently."""
        packages = list(packages)
        ranges = await asyncio.gather(
            *[self.get_caret_range(package) for package in packages]
        )
        return dict(zip(packages, ranges, strict=True))
