"""
Exception hierarchy for the client ingestion pipeline.

Only InputFileNotFoundError and ConfigurationError are meant to reach the
caller of a run; everything else is absorbed into run counters.
"""


class ClientIngestError(Exception):
    """Base class for all ingestion errors."""
    pass


class InputFileNotFoundError(ClientIngestError, FileNotFoundError):
    """Raised when the input file of a run does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Input file not found: {path}")


class ConfigurationError(ClientIngestError, ValueError):
    """Raised when pipeline configuration is invalid."""
    pass


class DuplicateKeyError(ClientIngestError):
    """
    Raised by a repository when a write violates the dni uniqueness constraint.

    Attributes:
        dni: The key that already exists in storage
    """

    def __init__(self, dni: int, message: str | None = None):
        self.dni = dni
        super().__init__(message or f"Client with dni {dni} already exists")
