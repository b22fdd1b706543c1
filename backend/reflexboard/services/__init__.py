"""Leaderboard domain services: validation, identity masking, storage,
aggregation and admin access.

These modules are imported by the HTTP blueprint and the socket handlers,
keeping transport concerns separated from the scoring rules.
"""
