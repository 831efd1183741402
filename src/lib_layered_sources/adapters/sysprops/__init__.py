"""Process-wide system properties source."""
