"""Release detection and installation."""
