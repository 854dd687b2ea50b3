"""Mock test assembly and statistics engine."""

__version__ = "0.1.0"
