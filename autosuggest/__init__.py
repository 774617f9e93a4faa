"""Search-as-you-type suggestions for help-center article indices."""

__version__ = "0.3.0"
