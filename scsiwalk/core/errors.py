"""Domain-specific errors for scsiwalk."""


class ScsiwalkError(Exception):
    """Base error for scsiwalk."""


class ConfigValidationError(ScsiwalkError):
    """Raised when a config file does not conform to schema or semantics."""


class ConfigLoadError(ScsiwalkError):
    """Raised when reading a config file fails."""


class FamilySelectionError(ScsiwalkError):
    """Raised when a requested command family tag is unknown."""


class RecordFormatError(ScsiwalkError):
    """Raised when a record cannot be rendered as a single capture line."""


class CaptureParseError(ScsiwalkError):
    """Raised when a capture stream cannot be parsed back into records."""


class TransportError(ScsiwalkError):
    """Base transport error."""


class TransportOpenError(TransportError):
    """Raised when the device node cannot be opened."""
