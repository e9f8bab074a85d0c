"""One-off maintenance scripts run against the hosted backend."""
