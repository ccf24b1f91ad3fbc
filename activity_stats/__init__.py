"""GitHub activity reconciliation engine."""
