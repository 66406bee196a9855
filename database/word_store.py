#!/usr/bin/env python3
"""
Word Store - Mots interdits (SQLite)

Stocke la liste globale des mots interdits dans varta.db.
Pas de cache mémoire: chaque évaluation relit la table pour refléter
immédiatement les /addword et /removeword.

Table: banwords
- id: INTEGER PRIMARY KEY
- word: TEXT UNIQUE (lowercase, jamais vide)
- added_by: TEXT (qui a ajouté)
- added_at: TIMESTAMP

Usage:
    store = WordStore("varta.db")
    store.add_word("spam", added_by="admin")
    if matches(text, store.list_words()):
        ...
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List

LOGGER = logging.getLogger(__name__)

DEFAULT_DB_PATH = "varta.db"


def normalize_word(word: str) -> str:
    """Forme stockée d'un mot: trim + lowercase"""
    return word.strip().lower()


class WordStore:
    """
    Liste des mots interdits (SQLite).

    Les mots sont stockés en lowercase pour un matching case-insensitive.
    Les entrées vides sont refusées ici, le matcher ne les filtre pas.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self._init_table()

    @contextmanager
    def _get_connection(self):
        """Context manager pour connexion SQLite."""
        conn = sqlite3.connect(self.db_path, timeout=10.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_table(self) -> None:
        """Crée la table banwords si elle n'existe pas."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS banwords (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    word TEXT NOT NULL UNIQUE,
                    added_by TEXT DEFAULT 'system',
                    added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        LOGGER.info(f"📝 BanWord table initialized ({self.db_path})")

    def list_words(self) -> List[str]:
        """
        Liste les mots interdits.

        Returns:
            Mots dans l'ordre d'ajout
        """
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT word FROM banwords ORDER BY id")
            return [row["word"] for row in cursor]

    def add_word(self, word: str, added_by: str = "admin") -> bool:
        """
        Ajoute un mot interdit.

        Args:
            word: Mot à bannir (sera trim + lowercase)
            added_by: Username de celui qui ajoute

        Returns:
            True si ajouté, False si vide ou déjà présent
        """
        word = normalize_word(word)
        if not word:
            return False

        try:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT INTO banwords (word, added_by) VALUES (?, ?)",
                    (word, added_by)
                )
        except sqlite3.IntegrityError:
            # UNIQUE(word)
            return False

        LOGGER.info(f"🚫 Banword added: '{word}' by {added_by}")
        return True

    def remove_word(self, word: str) -> int:
        """
        Retire un mot interdit.

        Args:
            word: Mot à retirer

        Returns:
            Nombre de lignes supprimées (0 si absent)
        """
        word = normalize_word(word)

        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM banwords WHERE word = ?", (word,))
            count = cursor.rowcount

        if count:
            LOGGER.info(f"✅ Banword removed: '{word}'")
        return count

    def count(self) -> int:
        """Nombre de mots stockés"""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM banwords").fetchone()[0]
