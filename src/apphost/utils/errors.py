"""
Custom exception classes for the application host.
"""

from typing import Any


class HostError(Exception):
    """Base exception for all application host errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None
    ):
        """Initialize host error with enhanced information.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            suggestions: List of suggested remediation steps
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.error_code = error_code or self.__class__.__name__.upper()
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigurationError(HostError):
    """Raised when there is an issue with the command line or configuration file."""
    pass


class BuilderError(HostError):
    """Raised by ApplicationHostBuilder.build when the composition is invalid."""
    pass


class AlreadyBuiltError(BuilderError):
    """Raised when build() is called a second time on the same builder."""
    pass


class MissingDependencyError(BuilderError):
    """Raised when a feature depends on a feature type that was not registered."""

    def __init__(self, dependency_name: str, feature_name: str | None = None):
        super().__init__(
            f"Dependency feature {dependency_name} cannot be found.",
            suggestions=[f"Register {dependency_name} before building the host"],
            context={"dependency": dependency_name, "feature": feature_name},
        )
        self.dependency_name = dependency_name
        self.feature_name = feature_name


class DuplicateFeatureError(BuilderError):
    """Raised when the same feature type is added to a collection twice."""
    pass


class InvalidStateError(HostError):
    """Raised when a lifecycle method is called out of order."""
    pass


class HostDisposedError(InvalidStateError):
    """Raised when starting a host that is disposing or disposed."""
    pass


class MissingComponentError(HostError):
    """Raised when a component the host needs was not resolved."""
    pass


class ServiceNotFoundError(HostError):
    """Raised when a service type is not registered."""

    def __init__(self, service_type: type, message: str | None = None):
        name = getattr(service_type, "__name__", str(service_type))
        super().__init__(message or f"Service {name} is not registered", context={"service": name})
        self.service_type = service_type


class FeatureNotFoundError(HostError):
    """Raised when no registered feature matches the requested type."""

    def __init__(self, feature_type: type):
        name = getattr(feature_type, "__name__", str(feature_type))
        super().__init__(f"The {name} feature is not supported", context={"feature": name})
        self.feature_type = feature_type


class FeatureError(HostError):
    """Base exception for errors raised by a feature."""

    def __init__(self, message: str, feature_name: str | None = None, cause: Exception | None = None):
        super().__init__(message, context={"feature": feature_name})
        self.feature_name = feature_name
        self.cause = cause


class FeatureInitializationError(FeatureError):
    """Raised when a feature fails to validate its dependencies or to initialize."""

    def __init__(self, feature_name: str, phase: str, cause: Exception):
        super().__init__(
            f"Feature {feature_name} failed during {phase}: {cause}",
            feature_name=feature_name,
            cause=cause,
        )
        self.phase = phase


class AggregateDisposalError(HostError):
    """Raised once after disposal when one or more features failed to dispose."""

    def __init__(self, exceptions: list[Exception]):
        details = "; ".join(f"{type(e).__name__}: {e}" for e in exceptions)
        super().__init__(
            f"{len(exceptions)} feature(s) failed to dispose: {details}",
            context={"count": len(exceptions)},
        )
        self.exceptions = list(exceptions)
