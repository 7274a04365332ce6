"""Terminal explorer and HTTP relay for FoundationDB status json read from a file or URL."""

__version__ = "0.1.0"