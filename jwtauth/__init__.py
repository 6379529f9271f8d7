"""Username/password authentication service issuing access and refresh tokens."""

__version__ = "0.1.0"
