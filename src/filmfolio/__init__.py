"""filmfolio — portfolio site content with swappable persistence backends."""

__version__ = "0.3.0"
