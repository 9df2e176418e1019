"""Application layer: DTOs, repository ports and services (use cases)."""
