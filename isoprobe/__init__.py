"""Transaction isolation probe for MySQL and PostgreSQL."""

__version__ = "0.1.0"
