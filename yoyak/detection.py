from __future__ import annotations

import re
from collections import Counter
from typing import Protocol

from .languages import LanguageCode


class LanguageDetector(Protocol):
    def detect(self, text: str) -> LanguageCode | None:  # noqa: D401
        """Best-effort guess of the language of ``text``; ``None`` if unsure."""


# Letters of scripts that identify a language (or a small family) on their own.
_SCRIPTS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("hangul", re.compile(r"[\u1100-\u11ff\u3130-\u318f\uac00-\ud7a3]")),
    ("kana", re.compile(r"[\u3040-\u30ff\u31f0-\u31ff]")),
    ("han", re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")),
    ("cyrillic", re.compile(r"[\u0400-\u04ff]")),
    ("greek", re.compile(r"[\u0370-\u03ff]")),
    ("arabic", re.compile(r"[\u0600-\u06ff]")),
    ("hebrew", re.compile(r"[\u0590-\u05ff]")),
    ("thai", re.compile(r"[\u0e00-\u0e7f]")),
    ("devanagari", re.compile(r"[\u0900-\u097f]")),
)

_SCRIPT_LANGUAGES = {
    "hangul": "ko",
    "greek": "el",
    "arabic": "ar",
    "hebrew": "he",
    "thai": "th",
    "devanagari": "hi",
}

_UKRAINIAN_LETTERS = re.compile(r"[іїєґІЇЄҐ]")

_WORD_RE = re.compile(r"[^\W\d_]+")

_STOP_WORDS: dict[str, frozenset[str]] = {
    "en": frozenset(
        "the and of to in is that it was for with as on are this be by not you"
        " have from or which but they we at an were been has will would there"
        " their what hello".split()
    ),
    "fr": frozenset(
        "le la les des du un une et est que qui dans pour pas sur au aux avec ce"
        " cette sont il elle nous vous mais ou plus par je bonjour merci".split()
    ),
    "es": frozenset(
        "el los las del un una y es que en por para con no se su al lo como más"
        " pero sus este esta está hola gracias".split()
    ),
    "de": frozenset(
        "der die das und ist nicht ein eine zu den von mit sich des auf für im"
        " dem auch es werden aus er sie wir ich hallo danke".split()
    ),
    "it": frozenset(
        "il di che e la per un una non sono del della con gli le nel alla anche"
        " come ma questo è ciao grazie".split()
    ),
    "pt": frozenset(
        "o os as de do da dos das em um uma e é que não para com por mais se na"
        " no ao olá obrigado".split()
    ),
    "nl": frozenset(
        "de het een en van is dat niet op te zijn met voor die ook maar als er"
        " aan hallo bedankt".split()
    ),
}


class HeuristicDetector:
    """Small dependency-free language detector.

    Non-Latin text is classified by the script most of its letters belong to.
    Latin-script text is classified by counting common function words; a tie
    between the best candidates is reported as unknown.
    """

    def detect(self, text: str) -> LanguageCode | None:
        letters = [ch for ch in text if ch.isalpha()]
        if not letters:
            return None
        by_script = self._script(text, len(letters))
        if by_script is not None:
            return by_script
        return self._stop_words(text)

    def _script(self, text: str, total: int) -> LanguageCode | None:
        counts = {name: len(pattern.findall(text)) for name, pattern in _SCRIPTS}
        if counts["kana"] and counts["kana"] + counts["han"] > total / 2:
            return "ja"
        name, count = max(counts.items(), key=lambda item: item[1])
        if count <= total / 2:
            return None
        if name == "han":
            return "zh"
        if name == "cyrillic":
            return "uk" if _UKRAINIAN_LETTERS.search(text) else "ru"
        return _SCRIPT_LANGUAGES.get(name)

    def _stop_words(self, text: str) -> LanguageCode | None:
        words = _WORD_RE.findall(text.lower())
        scores: Counter[str] = Counter()
        for word in words:
            for code, stop_words in _STOP_WORDS.items():
                if word in stop_words:
                    scores[code] += 1
        ranked = scores.most_common(2)
        if not ranked:
            return None
        if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
            return None
        return ranked[0][0]
