"""Process-level wiring: configuration, clients and security."""
