"""Configuration — settings, overlay root discovery, and logging."""
