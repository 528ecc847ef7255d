"""Built-in CLI sub-commands for staticcache.

* :mod:`~staticcache.commands.config` -- view and modify global settings.
* :mod:`~staticcache.commands.cache` -- policy checks, stats, and orphaned
  artifact cleanup.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands are plain callbacks registered directly on the root app.
"""
