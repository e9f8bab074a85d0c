"""pmdesk: project management desk backed by a hosted Postgres REST API."""

__version__ = "0.1.0"
