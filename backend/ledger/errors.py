class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class ConfigurationError(LedgerError):
    """A seeded or stored template violates its own invariants."""


class ValidationError(LedgerError):
    """A command was rejected; nothing was written."""


class NotFoundError(LedgerError):
    """A session, template or player id does not exist."""


class StorageUnavailable(LedgerError):
    """The configured database could not be opened."""
