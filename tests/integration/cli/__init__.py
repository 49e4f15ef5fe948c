"""Integration tests for full CLI pull, push and deletion journeys."""
