"""Infrastructure adapters for crmenrich."""
