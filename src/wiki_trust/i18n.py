"""Message catalog for human-readable labels and reasons."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "bannerTitle": "Page transparency",
        "statusAnalyzing": "Analyzing revision history...",
        "errorUnableScore": "Unable to score this page.",
        "errorAnalysisUnavailable": "Analysis unavailable.",
        "errorPageMissing": "Page not found.",
        "riskLow": "Low risk",
        "riskMedium": "Medium risk",
        "riskHigh": "High risk",
        "labelConfidence": "Confidence: $1/100",
        "labelQuality": "Quality: $1",
        "labelTopContributors": "Top contributors:",
        "labelRecentContributors": "Recent contributors:",
        "whyPrefix": "Why: $1",
        "noteBaseScore": "Based on the last $1 revisions.",
        "noContributorData": "No contributor data",
        "wordsAddedUnit": "words added",
        "maskedUser": "(hidden user)",
        "unknownUser": "(unknown)",
        "qualityFeatured": "Featured article",
        "qualityGood": "Good article",
        "qualityNone": "No quality label",
        "summaryRevisions": "$1 revisions",
        "summaryContributors": "$1 contributors",
        "summaryReverts": "$1% reverts",
        "summaryEdits90Days": "$1 edits in 90 days",
        "summaryPageAgeDays": "page created $1 days ago",
        "reasonVeryRecentLowHistory": "very recent page with little history",
        "reasonRecentLimitedHistory": "recent page with limited history",
        "reasonYoungPartialHistory": "young page, history still partial",
        "reasonHighActivity3Months": "high activity over the last 3 months",
        "reasonSuddenAcceleration3Months": "sudden acceleration of edits over 3 months",
        "reasonEditWar3Months": "possible edit war over the last 3 months",
        "reasonTopAuthorsRecognized": "main authors are recognized contributors",
        "reasonTopAuthorsUnrecognized": "main authors are not recognized contributors",
        "reasonManyNewEditorsInWindow": "many new editors over the last 3 months",
        "levelAnonymous": "anonymous",
        "levelNew": "new",
        "levelIntermediate": "intermediate",
        "levelEstablished": "established",
        "levelRecognized": "recognized",
        "levelUnknown": "unknown",
    },
    "fr": {
        "bannerTitle": "Transparence de la page",
        "statusAnalyzing": "Analyse de l'historique...",
        "errorUnableScore": "Impossible d'évaluer cette page.",
        "errorAnalysisUnavailable": "Analyse indisponible.",
        "errorPageMissing": "Page introuvable.",
        "riskLow": "Risque faible",
        "riskMedium": "Risque moyen",
        "riskHigh": "Risque élevé",
        "labelConfidence": "Confiance : $1/100",
        "labelQuality": "Qualité : $1",
        "labelTopContributors": "Principaux auteurs :",
        "labelRecentContributors": "Contributeurs récents :",
        "whyPrefix": "Pourquoi : $1",
        "noteBaseScore": "Basé sur les $1 dernières révisions.",
        "noContributorData": "Aucune donnée de contributeur",
        "wordsAddedUnit": "mots ajoutés",
        "maskedUser": "(utilisateur masqué)",
        "unknownUser": "(inconnu)",
        "qualityFeatured": "Article de qualité",
        "qualityGood": "Bon article",
        "qualityNone": "Aucun label",
        "summaryRevisions": "$1 révisions",
        "summaryContributors": "$1 contributeurs",
        "summaryReverts": "$1 % d'annulations",
        "summaryEdits90Days": "$1 modifications en 90 jours",
        "summaryPageAgeDays": "page créée il y a $1 jours",
        "reasonVeryRecentLowHistory": "page très récente avec peu d'historique",
        "reasonRecentLimitedHistory": "page récente avec un historique limité",
        "reasonYoungPartialHistory": "page jeune, historique encore partiel",
        "reasonHighActivity3Months": "forte activité sur les 3 derniers mois",
        "reasonSuddenAcceleration3Months": "accélération soudaine des modifications sur 3 mois",
        "reasonEditWar3Months": "guerre d'édition possible sur les 3 derniers mois",
        "reasonTopAuthorsRecognized": "les principaux auteurs sont des contributeurs reconnus",
        "reasonTopAuthorsUnrecognized": "les principaux auteurs ne sont pas reconnus",
        "reasonManyNewEditorsInWindow": "beaucoup de nouveaux contributeurs sur 3 mois",
        "levelAnonymous": "anonyme",
        "levelNew": "nouveau",
        "levelIntermediate": "intermédiaire",
        "levelEstablished": "confirmé",
        "levelRecognized": "reconnu",
        "levelUnknown": "inconnu",
    },
}

SUPPORTED_LANGUAGES = tuple(_MESSAGES)


class Translator(Protocol):
    def __call__(self, key: str, substitutions: Sequence[str] | None = None) -> str: ...


class MessageCatalog:
    """Look up messages by key, substituting ``$1``, ``$2``... placeholders.

    Unknown keys render as the key itself.
    """

    def __init__(self, language: str = "en"):
        self.language = language if language in _MESSAGES else "en"
        self._messages = _MESSAGES[self.language]

    def __call__(self, key: str, substitutions: Sequence[str] | None = None) -> str:
        message = self._messages.get(key) or _MESSAGES["en"].get(key)
        if not message:
            return key
        for index, value in reversed(list(enumerate(substitutions or (), start=1))):
            message = message.replace(f"${index}", str(value))
        return message
