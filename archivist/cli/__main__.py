"""Allow ``python -m archivist.cli`` execution (runs the archives CLI)."""

from archivist.cli.archives import main

main()
