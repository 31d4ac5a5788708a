"""Infrastructure layer: outbound integrations."""
