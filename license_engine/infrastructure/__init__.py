"""Infrastructure Layer: logging setup and catalog file IO."""
