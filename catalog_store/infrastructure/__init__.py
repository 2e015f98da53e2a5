"""Infrastructure adapters: configuration, database, and external feed."""
