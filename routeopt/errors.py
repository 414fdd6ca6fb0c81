"""Exceptions raised while assembling a simulation run."""


class ModelDescriptionError(ValueError):
    """Invalid layer/agent/entity declaration (e.g. duplicate name)."""


class ConfigurationError(ValueError):
    """Run configuration does not fit the model or its data sources."""
