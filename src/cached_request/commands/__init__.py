"""Built-in CLI sub-commands for cached_request.

* :mod:`~cached_request.commands.request` -- ``get`` and ``post``, which
  issue cached requests through a :class:`~cached_request.client.CacheClient`.
* :mod:`~cached_request.commands.config` -- view and modify persisted
  defaults.

Each module exports either a plain callback registered directly on the
root app (``get``, ``post``) or a :class:`typer.Typer` sub-application
(``config``).
"""
