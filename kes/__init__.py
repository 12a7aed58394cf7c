"""Building blocks of a key management server and its command-line client."""

__version__ = "0.1.0"