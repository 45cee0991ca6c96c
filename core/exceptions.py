"""
Error taxonomy shared by services and pages.

Pages catch :class:`EHRError` (and SQLAlchemy errors) around every read and
write and turn them into notifications; nothing here is fatal to the app.
"""


class EHRError(Exception):
    """Base class for application errors shown to the user."""


class AuthenticationError(EHRError):
    """Bad credentials or an unknown/expired session."""


class AccessDenied(EHRError):
    """A write was rejected by the row-level policy."""


class ValidationError(EHRError):
    """Input or state transition rejected before (or by) the store."""


class NotFoundError(EHRError):
    """The referenced row does not exist or is not visible to the caller."""


class ProvisioningNotSupported(EHRError):
    """Directory entries can only be created through account sign-up."""
