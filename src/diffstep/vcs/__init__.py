"""Version-control integration."""
