"""Realtime notification delivery service for the HR administration system."""
