from sandstone_workspace.models.configuration import (
    DEFAULT_ORG,
    Configuration,
    DependencySection,
    LinkTarget,
    LocalPackage,
    PackageManagerConfiguration,
    RegistryConfiguration,
)
from sandstone_workspace.models.manifest import ContributeManifest, Manifest
from sandstone_workspace.models.package import PackageJson, is_linked
from sandstone_workspace.models.steps import StepOutcome, StepResult

__all__ = [
    'DEFAULT_ORG',
    'Configuration',
    'ContributeManifest',
    'DependencySection',
    'LinkTarget',
    'LocalPackage',
    'Manifest',
    'PackageJson',
    'PackageManagerConfiguration',
    'RegistryConfiguration',
    'StepOutcome',
    'StepResult',
    'is_linked',
]
