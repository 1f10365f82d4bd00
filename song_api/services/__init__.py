"""Service layer: extraction, format selection, caching and rate limiting."""
