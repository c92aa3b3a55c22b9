"""Porter: agent tools for deploying Railway services with a tracked task list."""

__version__ = "0.1.0"
