"""Game domain services: the session engine, scoring and the host timer.

This package holds the game mechanics used by the Socket.IO handlers,
keeping transport concerns separated from core game state.
"""
