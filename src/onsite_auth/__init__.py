"""OnSite auth - registration, login and bearer-session service."""

__version__ = "0.1.0"
