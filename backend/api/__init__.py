"""API layer: dependencies and routes."""
