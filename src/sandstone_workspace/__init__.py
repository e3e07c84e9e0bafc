"""Developer workflow automation for the Sandstone workspace."""

from sandstone_workspace.version import __version__

__all__ = ['__version__']
