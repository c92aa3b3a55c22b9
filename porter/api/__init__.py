"""Agent-facing surface: tool dispatcher, Railway and chat tools, REST app."""
