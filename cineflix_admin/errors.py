"""Exceptions raised by the admin console."""


class ConsoleError(Exception):
    """Base class for every error the console reports to the operator."""


class ValidationFailure(ConsoleError):
    """Required-field check failed before any network call."""


class AuthFailure(ConsoleError):
    """Credentials rejected, or no operator is signed in."""


class GatewayFailure(ConsoleError):
    """A persistence or auth service call failed (offline, permission, quota...)."""


class ConsoleBusy(ConsoleError):
    """Another gateway call is still in flight."""


class ConfigError(ConsoleError):
    """Missing or invalid environment configuration."""
