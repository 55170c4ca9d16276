"""Real-time quiz session server."""
