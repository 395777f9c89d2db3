"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cached_request.exceptions.CachedRequestError`
subclass. Shell wrappers can inspect the exit code to tell a bad flag from
an unreachable host without parsing stderr.

Example::

    $ cached-request get https://unreachable.invalid/
    $ echo $?
    6   # EXIT_TRANSPORT_ERROR -- the network call failed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed input."""

EXIT_TRANSPORT_ERROR = 6
"""The network call failed (timeout, DNS failure, TLS failure, connection refused)."""
