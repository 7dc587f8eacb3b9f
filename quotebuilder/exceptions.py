"""Custom exception hierarchy for the quote builder.

Arithmetic and index errors signal caller bugs and propagate. Format and
store errors are recovered inside the draft lifecycle and only logged.
"""


class QuoteBuilderError(Exception):
    """Base exception for all quote builder errors."""

    pass


# Business logic exceptions
class BusinessLogicError(QuoteBuilderError):
    """Base exception for business logic violations."""

    pass


class CalculationError(BusinessLogicError, ArithmeticError):
    """Raised when a calculation has no finite result (tax back-out at -100%)."""

    pass


# Quote state exceptions
class QuoteStateError(QuoteBuilderError):
    """Base exception for invalid operations on the live quote."""

    pass


class LineItemIndexError(QuoteStateError, IndexError):
    """Raised when a line item index is outside the current item list."""

    pass


# Import/Export exceptions
class ImportExportError(QuoteBuilderError):
    """Base exception for serialization of quotes."""

    pass


class DraftFormatError(ImportExportError):
    """Raised when a persisted draft blob is structurally invalid."""

    pass


# Persistence exceptions
class PersistenceError(QuoteBuilderError):
    """Base exception for draft storage errors."""

    pass


class DraftStoreError(PersistenceError):
    """Raised when the draft store cannot read or write its slot."""

    pass


class DraftEncryptionError(DraftStoreError):
    """Raised when an encrypted draft cannot be encrypted or decrypted."""

    pass


# Configuration exceptions
class ConfigurationError(QuoteBuilderError):
    """Base exception for configuration-related errors."""

    pass


class SettingsError(ConfigurationError):
    """Raised when a settings value cannot be interpreted."""

    pass
