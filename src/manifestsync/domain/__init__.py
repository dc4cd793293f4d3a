"""Domain model and services for manifest-driven catalog discovery."""
