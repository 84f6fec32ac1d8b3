"""jsonstore - content-addressable JSON document store."""

__version__ = "1.0.0"
