"""External integrations and derived statistics."""
