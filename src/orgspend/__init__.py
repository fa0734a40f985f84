"""orgspend — organizational AI usage and spend analytics."""

__version__ = "0.1.0"
