"""Display formatting for analysis results."""
