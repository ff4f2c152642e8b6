"""
errors.py
---------
Error taxonomy shared by the database layer and the HTTP handlers.
Every failure a handler can produce is one of these; the handlers layer
turns them into the JSON envelope.
"""


class CadastroError(Exception):
    """Base class. ``str(error)`` is the text returned to the client."""

    status_code = 500


class StoreUnavailable(CadastroError):
    """No connection could be obtained from the pool."""


class PoolExhausted(StoreUnavailable):
    """Every connection is leased and the pool does not queue waiters."""


class PoolClosed(StoreUnavailable):
    """The pool was closed (application shutting down)."""


class ConstraintViolation(CadastroError):
    """The store rejected a statement on a column constraint (e.g. duplicate cpf)."""


class StoreError(CadastroError):
    """Any other failure raised while executing a statement."""


class NotFound(CadastroError):
    """Lookup by key matched no record."""

    status_code = 404


class MalformedRequest(CadastroError):
    """The request body could not be decoded (e.g. broken JSON)."""

    status_code = 400
