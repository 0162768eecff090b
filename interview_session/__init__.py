"""Interview conversation state: records, per-connection context, and the turn engine."""
