"""SpinCity backend: persistence, consistency and backup for the business app."""

__version__ = "0.1.0"
