"""
vinyl-vault: a personal vinyl collection manager on top of the Discogs API.
"""

__version__ = "1.0.0"
