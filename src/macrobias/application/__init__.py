"""Application layer: use cases orchestrating sources, engine and repositories."""
