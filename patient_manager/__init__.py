"""Patient record management client."""

__version__ = "0.1.0"
