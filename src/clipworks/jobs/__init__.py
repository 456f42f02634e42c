"""Media job pipeline: validation, transformation and publishing."""
