"""External service clients and pipeline stages."""
