"""
Shared league room service: a persisted team list pushed live to every
connected client, plus fantasy scoring from the ESPN NFL feed.
"""

__version__ = '1.0.0'
