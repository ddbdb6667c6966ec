"""Error types raised by the CoreComply core."""


class CoreComplyError(Exception):
    """Base exception for CoreComply errors."""
    pass


class ArtifactNotFoundError(CoreComplyError, KeyError):
    """Raised when an evidence artifact id does not exist."""
    pass


class UnknownStepError(CoreComplyError, ValueError):
    """Raised when a mutating call names a setup step that does not exist."""
    pass


class ConfigurationError(CoreComplyError, ValueError):
    """Raised when the environment configuration is invalid."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__(f"Invalid configuration: {self.issues}")
