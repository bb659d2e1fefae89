"""
Exceptions raised by the telemetry engine.
"""


class TelemetryError(Exception):
    """Base class of every error raised by the telemetry engine."""


class MalformedEventError(TelemetryError):
    """
    A packet or energy event is missing a required field or carries an
    invalid value (no identity, negative size or energy, bad timestamp).
    Monitors reject the single event and keep going.
    """


class DoubleFinalizeError(TelemetryError):
    """finalize() was called again with inputs different from the first call."""


class RunStateError(TelemetryError):
    """Operation not allowed in the current phase of the run."""
