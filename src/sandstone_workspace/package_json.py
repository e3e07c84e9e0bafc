"""Reading and writing the workspace JSON documents."""

import json
import logging
import pathlib
import typing

import pydantic

from sandstone_workspace import errors, models

LOGGER = logging.getLogger(__name__)

PACKAGE_JSON = 'package.json'

ModelT = typing.TypeVar('ModelT', bound=pydantic.BaseModel)


def read_json(path: pathlib.Path) -> typing.Any:
    """Load a JSON document.

    Raises:
        errors.ManifestError: If the file is missing or not valid JSON

    """
    try:
        with path.open('r', encoding='utf-8') as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise errors.ManifestError(f'Missing file: {path}') from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise errors.ManifestError(f'Failed to read {path}: {exc}') from exc


def write_json(path: pathlib.Path, data: typing.Any) -> None:
    """Write a JSON document with two-space indent and a trailing newline."""
    path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False) + '\n',
        encoding='utf-8',
    )
    LOGGER.debug('Wrote %s', path)


def read_model(path: pathlib.Path, model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate(read_json(path))
    except pydantic.ValidationError as exc:
        raise errors.ManifestError(f'Invalid {path}: {exc}') from exc


def read_package(directory: pathlib.Path) -> models.PackageJson:
    return read_model(directory / PACKAGE_JSON, models.PackageJson)


def write_package(
    directory: pathlib.Path, package: models.PackageJson
) -> None:
    write_json(directory / PACKAGE_JSON, package.model_dump())


def read_manifest(config: models.Configuration) -> models.Manifest:
    return read_model(config.path(config.manifest_file), models.Manifest)


def read_contribute_manifest(
    config: models.Configuration,
) -> models.ContributeManifest:
    """Load the contributor overrides, defaulting to the upstream org."""
    path = config.path(config.contribute_file)
    if not path.exists():
        return models.ContributeManifest(git_user=config.default_org)
    return read_model(path, models.ContributeManifest)


def write_contribute_manifest(
    config: models.Configuration, manifest: models.ContributeManifest
) -> None:
    write_json(config.path(config.contribute_file), manifest.to_json())
