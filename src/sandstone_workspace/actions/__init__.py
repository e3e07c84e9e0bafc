from sandstone_workspace.actions.link import LinkActions, LinkCommand
from sandstone_workspace.actions.setup import SetupActions
from sandstone_workspace.actions.template import TemplateActions

__all__ = ['LinkActions', 'LinkCommand', 'SetupActions', 'TemplateActions']
