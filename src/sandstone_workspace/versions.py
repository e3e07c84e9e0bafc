"""Version ordering for release-line branch names.

Template branches are named ``<prefix>-<version>`` where the version is
``MAJOR.MINOR.PATCH`` optionally followed by ``-alpha.N``, ``-beta.N`` or
``-rc.N``. Versions are compared through a numeric key so that a final
release outranks every pre-release of the same number and unknown
pre-release labels rank below all recognized ones.
"""

import enum
import functools
import math
import re
import typing

PRERELEASE_PATTERN = re.compile(r'(alpha|beta|rc)\.([0-9]+)')
NUMBER_PATTERN = re.compile(r'[0-9]+')
PRERELEASE_ORDER = {'alpha': 0, 'beta': 1, 'rc': 2}

# Tail of a release version, larger than any parsed component
RELEASE = math.inf

# Tail of an unrecognized pre-release, smaller than any parsed component
UNKNOWN = -1

VersionKey = tuple[int | float, ...]


class TemplateType(enum.StrEnum):
    """Branch prefixes of the template repository."""

    pack = 'pack'
    library = 'library'


# int() refuses strings longer than sys.get_int_max_str_digits()
_CHUNK_DIGITS = 1000


def _number(digits: str) -> int:
    """Convert a run of ASCII digits of any length to an integer."""
    value = 0
    for start in range(0, len(digits), _CHUNK_DIGITS):
        chunk = digits[start : start + _CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def _component(value: str) -> int:
    if NUMBER_PATTERN.fullmatch(value) is None:
        return UNKNOWN
    return _number(value)


def parse_version(version: str) -> VersionKey:
    """Convert a version string into a comparable key.

    ``1.2.3`` becomes ``(1, 2, 3, inf, inf)``, ``1.2.3-beta.4`` becomes
    ``(1, 2, 3, 1, 4)`` and ``1.2.3-nightly`` becomes
    ``(1, 2, 3, -1, -1)``. This never raises.

    """
    main, _, prerelease = version.partition('-')
    key = [_component(part) for part in main.split('.')]
    if not prerelease:
        return (*key, RELEASE, RELEASE)
    match = PRERELEASE_PATTERN.fullmatch(prerelease)
    if match:
        stage, number = match.groups()
        return (*key, PRERELEASE_ORDER[stage], _number(number))
    return (*key, UNKNOWN, UNKNOWN)


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if ``a`` is older than ``b``
         0 if both are equal
         1 if ``a`` is newer than ``b``

    """
    key_a, key_b = parse_version(a), parse_version(b)
    for index in range(max(len(key_a), len(key_b))):
        part_a = key_a[index] if index < len(key_a) else 0
        part_b = key_b[index] if index < len(key_b) else 0
        if part_a != part_b:
            return -1 if part_a < part_b else 1
    return 0


version_key = functools.cmp_to_key(compare_versions)


def branch_version(branch: str, prefix: str) -> str | None:
    """Return the version part of a branch name, if it has the prefix."""
    separator = f'{prefix}-'
    if not branch.startswith(separator):
        return None
    return branch[len(separator) :]


def find_latest_branch(
    branches: typing.Iterable[str], prefix: str
) -> str | None:
    """Return the branch with the highest version for the given prefix.

    Only branches named ``<prefix>-<version>`` are considered. Returns
    ``None`` when no branch matches.

    """
    candidates = {
        branch: version
        for branch in branches
        if (version := branch_version(branch, prefix)) is not None
    }
    if not candidates:
        return None
    return max(
        candidates, key=lambda branch: version_key(candidates[branch])
    )
