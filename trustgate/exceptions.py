"""Exceptions."""


class ConfigurationError(RuntimeError):
    """Raised when the gate configuration is missing or invalid."""


class DecisionChannelError(RuntimeError):
    """
    Failed to obtain a decision from the trust service.

    This is raised for connection failures, timeouts, and unexpected or
    malformed responses. It carries no verdict, and must not be treated as a
    denial.
    """
