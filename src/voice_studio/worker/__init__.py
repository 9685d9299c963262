"""Agent worker dispatched by LiveKit into provisioned rooms."""
