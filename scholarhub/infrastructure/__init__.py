"""Infrastructure layer: persistence, security and delivery transports."""
