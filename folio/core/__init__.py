"""Core configuration, logging, and caller identity."""
