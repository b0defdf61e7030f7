"""Domain-specific errors for trgenctl."""


class TrgenError(Exception):
    """Base error for trgenctl."""


class ConfigValidationError(TrgenError):
    """Raised when a config file does not conform to schema or semantics."""


class ConfigLoadError(TrgenError):
    """Raised when reading config sources fails."""


class PinResolutionError(TrgenError, ValueError):
    """Raised when a pin name or id cannot be resolved."""


class InstructionRangeError(TrgenError, ValueError):
    """Raised when an instruction field, memory index or mask is out of bounds."""


class ProtocolError(TrgenError):
    """Raised on malformed or mismatched device replies."""


class NotConnectedError(TrgenError):
    """Raised when an operation needs device capabilities that were never queried."""


class TransportError(TrgenError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised on TCP connect failures."""


class TransportSendError(TransportError):
    """Raised when frame sending or reply reading fails."""


class TransportTimeoutError(TransportError):
    """Raised when connect or receive times out."""
