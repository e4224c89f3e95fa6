"""Bundled configuration files (weights, asset universe)."""
