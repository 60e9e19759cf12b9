"""UK government tender sync: Find a Tender OCDS releases into a local store."""

__version__ = "0.1.0"
