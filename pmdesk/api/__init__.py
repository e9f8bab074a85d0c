"""HTTP API for pmdesk."""
