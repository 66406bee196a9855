"""
VartaBot Database Module
SQLite storage for the banned-word list
"""

from .word_store import WordStore, normalize_word

__all__ = ['WordStore', 'normalize_word']
