"""Coordination Policy Service."""
