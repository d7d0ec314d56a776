"""
POD Exception Hierarchy

All exceptions inherit from PODError for easy catching.
"""


class PODError(Exception):
    """Base exception for all POD errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class KeyFormatError(PODError):
    """Raised when a key does not decode to its required fixed length"""
    pass


class SignatureFormatError(KeyFormatError):
    """Raised when a signature does not decode to 64 bytes"""
    pass


class EntryNameError(PODError):
    """Raised when an entry name is not a legal identifier"""
    pass


class ValueRangeError(PODError):
    """Raised when a value payload falls outside its kind's legal range"""
    pass


class ValueFormatError(PODError):
    """Raised when JSON or a payload does not match any accepted encoding"""
    pass


class DecodeError(PODError):
    """Raised when bytes decode but are not a valid curve point"""
    pass


class EmptyEntriesError(PODError):
    """Raised when a content ID is requested over zero entries"""
    pass
