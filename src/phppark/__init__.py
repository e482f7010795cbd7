"""phppark: local PHP development sites behind NGINX."""

__version__ = "0.1.0"
