"""Job marketplace settlement service."""
