"""
⚠️ Errors - Hiérarchie d'exceptions de VartaBot

Deux familles:
- PlatformError: échecs d'appels Telegram pendant l'exécution d'une sanction
  (loggés sur le canal d'audit, jamais propagés au-delà de l'Enforcer)
- ValidationError: requête invalide d'un utilisateur (réponse directe, pas de retry)
"""
from typing import Optional


class VartaError(Exception):
    """Base de toutes les erreurs du bot"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


# ============================================================================
# PLATEFORME
# ============================================================================

class PlatformError(VartaError):
    """Échec d'un appel à l'API Telegram"""

    label = "Erreur inconnue"

    def describe(self) -> str:
        """Ligne lisible pour le canal d'audit (label + message)"""
        return f"{self.label}: {self.message}"


class PlatformAPIError(PlatformError):
    """Requête rejetée par Telegram (droits insuffisants, message introuvable...)"""

    label = "Erreur API"


class TransportError(PlatformError):
    """Telegram injoignable (réseau, timeout)"""

    label = "Erreur réseau"


# ============================================================================
# VALIDATION
# ============================================================================

class ValidationError(VartaError):
    """Requête utilisateur invalide - signalée au demandeur, jamais escaladée"""


class SelfVoteError(ValidationError):
    """La cible d'un voteban tente de voter sur son propre cas"""

    def __init__(self, voter_id: int):
        super().__init__(f"User {voter_id} cannot vote on their own voteban")
        self.voter_id = voter_id


class DuplicateVoteError(ValidationError):
    """Même vote soumis deux fois par le même votant (no-op)"""

    def __init__(self, voter_id: int, wants_ban: bool):
        super().__init__(f"User {voter_id} already voted {'ban' if wants_ban else 'keep'}")
        self.voter_id = voter_id
        self.wants_ban = wants_ban


class AdminTargetError(ValidationError):
    """Voteban lancé contre un administrateur du groupe"""


class SessionClosedError(ValidationError):
    """Vote sur une session déjà résolue"""


# ============================================================================
# REGISTRY / STORE
# ============================================================================

class NotFoundError(VartaError):
    """Mot ou session introuvable"""


class DuplicatePollError(VartaError):
    """Une session existe déjà pour ce message d'ancrage"""

    def __init__(self, poll_id: int):
        super().__init__(f"Voteban session already registered for poll {poll_id}")
        self.poll_id = poll_id
