"""Exceptions raised by the telemetry batcher.

Enqueueing never raises; these cover construction, lifecycle misuse and the
named reporter registry.
"""


class BatchReporterError(Exception):
    """Base error for the telemetry batcher."""

    pass


class ConfigurationError(BatchReporterError):
    """Invalid reporter construction or settings (e.g. a non-positive batch size)."""

    pass


class ReporterStoppedError(BatchReporterError):
    """Lifecycle call on a reporter that has already been stopped."""

    pass


class ReporterRegistryError(BatchReporterError):
    """A reporter name is already registered."""

    pass


class ReporterNotFoundError(BatchReporterError):
    """No reporter is registered under the requested name."""

    pass
