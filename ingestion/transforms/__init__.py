"""Provider payload transforms. Pure functions, no IO."""
