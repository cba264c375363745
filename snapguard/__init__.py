"""snapguard — pre-release check for SNAPSHOT plugin dependencies."""

__version__ = "0.1.0"
