"""Domain models and error types shared across the build pipeline."""
