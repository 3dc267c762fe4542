"""vitrine: content, cart and session state for a single-page fashion catalog."""

__version__ = "0.1.0"
