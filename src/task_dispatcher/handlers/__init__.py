"""Task handler registry and built-in handler types."""
