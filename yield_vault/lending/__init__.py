"""External lending protocol integration."""
