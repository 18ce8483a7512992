"""Backend services: persistence, auth and feedback scoring."""
