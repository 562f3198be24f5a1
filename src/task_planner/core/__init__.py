"""Ports, runtime state and the interactive session."""
