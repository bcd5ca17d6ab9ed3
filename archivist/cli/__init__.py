# =============================================================================
# archivist/cli/__init__.py: CLI Module Overview
# =============================================================================
#
# Command-line tools for operators, run via `python -m archivist.cli.<module>`.
#
#   ARCHIVES (archives.py)
#      Polls outstanding Save Page Now jobs, prints per-subject archive
#      summaries and lists Wayback snapshots of a URL.
#
# All CLI modules use argparse and build their own service graph through
# archivist.main.build_archive_service rather than talking to the API.
# =============================================================================

"""CLI tools for archivist.

- ``python -m archivist.cli.archives``: poll capture jobs, show archive
  summaries and list snapshots.
"""
