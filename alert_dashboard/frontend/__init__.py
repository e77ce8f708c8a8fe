"""HTML rendering for the dashboard."""
