"""Allow ``python -m gridbase`` to run the CLI."""

from gridbase.cli import main

main()
