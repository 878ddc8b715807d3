"""evrun: CLI runner for eventon applications.

Reads ``[tool.eventon]`` from a project's ``pyproject.toml``, installs a
configured default dispatcher, imports the local plugins, then
publishes the start event (``app.main`` unless configured otherwise).

Usage::

    evrun /path/to/project
"""
