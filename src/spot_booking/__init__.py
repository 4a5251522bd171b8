"""In-memory parking spot booking tracker."""

__version__ = "1.0.0"
