"""Services Layer — roster engine and interaction dispatch over injected ports."""
