# ==============================================
# Exceptions
# ==============================================
#
# - FieldmetaError        → base for everything raised by this package
# - DeveloperError        → configuration mistakes in a field tree
# - DuplicateKeyError     → two fields resolve to the same storage key
# - UnauthorizedError     → nonce present but invalid
#
# ==============================================


class FieldmetaError(Exception):
    """Base class for fieldmeta errors."""


class DeveloperError(FieldmetaError):
    """The field tree is configured incorrectly. Never recoverable at runtime."""


class DuplicateKeyError(DeveloperError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"You have two fields in this group saving to the same key: {key}"
        )


class UnauthorizedError(FieldmetaError, PermissionError):
    """A submitted nonce failed verification."""
