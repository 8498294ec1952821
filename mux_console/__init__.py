"""Admin API for a video library hosted on Mux."""

__version__ = "0.1.0"
