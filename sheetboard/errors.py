from __future__ import annotations

"""Error taxonomy shared by the adapters, the reconcilers and the engine.

Local I/O:   SourceUnreadable / SinkUnwritable
Remote I/O:  AuthRejected / RemoteValidation / Unreachable / UnexpectedShape
Data:        KeyFieldMissing / DuplicateKey / GroupNotFound

None of these are retried by the layer that raises them.
"""

__all__ = [
    "SyncError",
    "SourceUnreadable",
    "SinkUnwritable",
    "RemoteError",
    "AuthRejected",
    "RemoteValidation",
    "Unreachable",
    "UnexpectedShape",
    "KeyFieldError",
    "KeyFieldMissing",
    "DuplicateKey",
    "GroupNotFound",
]


class SyncError(Exception):
    """Base class for every failure that aborts a sync run."""


class SourceUnreadable(SyncError):
    pass


class SinkUnwritable(SyncError):
    pass


class RemoteError(SyncError):
    """Failure reported by (or while talking to) the board API."""


class AuthRejected(RemoteError):
    pass


class RemoteValidation(RemoteError):
    pass


class Unreachable(RemoteError):
    pass


class UnexpectedShape(RemoteError):
    pass


class KeyFieldError(SyncError):
    pass


class KeyFieldMissing(KeyFieldError):
    """A record lacks the key field, or its key value is blank."""


class DuplicateKey(KeyFieldError):
    """Two records share the same trimmed key value."""


class GroupNotFound(SyncError):
    pass
