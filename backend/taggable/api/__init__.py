"""API routes and router aggregation."""
