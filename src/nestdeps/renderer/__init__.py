"""Output adapters for module graphs."""
