"""
Minigame Engines.

Pure game-state engines for the arcade mini-games, plus the thin
configuration and Supabase adapters used to host them.
"""

__version__ = "0.1.0"
