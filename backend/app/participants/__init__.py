"""Participant presence: join, heartbeat and inactivity eviction."""
