"""Exception types raised by promops"""


class PromOpsError(Exception):
    """Base class for promops errors"""


class OperationDecodeError(PromOpsError):
    """Raised when wire data cannot be turned back into an Operation"""


class InvalidOperationError(PromOpsError, ValueError):
    """Raised by consumers that refuse to apply an operation"""

    def __init__(self, message: str, operation=None):
        super().__init__(message)
        self.operation = operation
