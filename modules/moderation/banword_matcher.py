"""
BanWord Matcher - Détection des mots interdits dans un message

Matching par sous-chaîne: "spam" matche aussi
dans "antispam". Pas de word boundary.
"""

from typing import Iterable, Optional


def find_banword(text: str, words: Iterable[str]) -> Optional[str]:
    """
    Cherche le premier mot interdit contenu dans le texte.

    Args:
        text: Texte du message (ou légende)
        words: Liste courante des mots interdits

    Returns:
        Le mot trouvé (tel que stocké), ou None
    """
    text_lower = (text or "").lower()
    if not text_lower:
        return None

    for word in words:
        if word and word.lower() in text_lower:
            return word
    return None


def matches(text: str, words: Iterable[str]) -> bool:
    """True si au moins un mot interdit apparaît dans le texte"""
    return find_banword(text, words) is not None
