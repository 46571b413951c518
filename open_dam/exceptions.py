"""
Custom exception hierarchy for the asset catalog.

Library errors (OSError, sqlite3.Error, Pillow decode errors) are wrapped
into these at the adapter boundary so callers only deal with one family.
"""


class DamError(Exception):
    """Base exception for all catalog errors."""
    pass


class FileOperationError(DamError):
    """Raised when filesystem access (listing, stat, move) fails."""
    pass


class IdentityError(DamError):
    """Raised when a path cannot be rendered as text to derive its id."""
    pass


class StoreError(DamError):
    """Raised when the catalog store fails."""
    pass


class NotFoundError(DamError):
    """Raised when a lookup matches no entry."""
    pass


class DecodeError(DamError):
    """Raised when a file cannot be decoded into a thumbnail."""
    pass


class LaunchError(DamError):
    """Raised when the OS default application cannot be launched."""
    pass


class NotInitializedError(DamError):
    """Raised when a directory has no catalog marker."""
    pass


class AlreadyInitializedError(DamError):
    """Raised when init is run on a directory that is already a catalog."""
    pass
