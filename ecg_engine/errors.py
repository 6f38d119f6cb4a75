# ecg_engine/errors.py


class ConfigError(ValueError):
    """Rhythm spec rejected at load time (mode/generator mismatch or missing required values)."""


class UsageError(RuntimeError):
    """Engine called out of order, e.g. sampling before a rhythm is loaded."""
