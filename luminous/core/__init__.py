"""Configuration, domain models and session state."""
