"""Device transports."""
