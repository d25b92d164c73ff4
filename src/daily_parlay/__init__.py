"""Daily NBA parlay tracker."""

__version__ = "0.1.0"
