"""Tagged, length-prefixed TCP messaging client with a typed byte buffer."""

__version__ = "0.1.0"