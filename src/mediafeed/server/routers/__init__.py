"""API routers for the mediafeed HTTP server."""
