"""Pure statistics over price series. No IO, no shared state."""
