"""Infrastructure: persistence, security, storage and messaging adapters."""
