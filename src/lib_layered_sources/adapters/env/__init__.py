"""Environment variable source."""
