import sys

from sandstone_workspace import cli

sys.exit(cli.main())
