"""Infrastructure layer: configuration, data sources, storage and analysis."""
