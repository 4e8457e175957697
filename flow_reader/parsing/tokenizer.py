"""
Word and RSVP tokenization shared by word counting, search and presentation.

`get_word_count` is the single definition of a "word" used by the position
engine: a maximal run of non-whitespace characters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple


class Pause:
    SENTENCE_END = 2.0
    QUESTION = 1.8
    EXCLAMATION = 2.0
    ELLIPSIS = 2.5
    COMMA = 1.5
    DASH = 1.3
    COLON = 1.6
    SEMICOLON = 1.7
    CLOSE_PAREN = 1.2
    CLOSE_QUOTE = 1.3
    TRANSITION = 1.2
    PARAGRAPH_END = 3.0
    NONE = 1.0


ABBREVIATIONS = frozenset(
    {
        # titles
        "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "rev", "hon", "gov", "pres", "gen", "col", "lt", "sgt",
        # academic
        "ph", "phd", "md", "dds", "esq", "llb", "ma", "ba", "bs", "mba", "rn", "cpa",
        # common
        "vs", "etc", "eg", "ie", "al", "approx", "dept", "est", "inc", "corp", "ltd", "co",
        "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
        "mon", "tue", "wed", "thu", "fri", "sat", "sun",
        "st", "ave", "blvd", "rd", "ln", "ct", "apt", "ste", "fl", "mt", "ft",
        "no", "vol", "pp", "pg", "ch", "sec", "fig", "ref", "ed",
        # measurements
        "oz", "lb", "lbs", "in", "cm", "mm", "km", "mi", "kg", "mg", "ml", "hr", "min",
        # regions
        "u", "uk", "usa", "eu",
    }
)

TRANSITION_WORDS = frozenset(
    {
        "however", "nevertheless", "nonetheless", "although", "though", "whereas",
        "conversely", "instead", "rather", "yet", "still",
        "furthermore", "moreover", "additionally", "besides", "also", "likewise",
        "therefore", "thus", "hence", "consequently", "accordingly", "because",
        "specifically", "namely", "notably", "particularly",
        "firstly", "secondly", "thirdly", "finally", "lastly", "meanwhile", "subsequently",
        "ultimately", "overall", "essentially", "basically",
    }
)

_WORD_RE = re.compile(r"\S+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n+")
_ELLIPSIS_RE = re.compile(r"(\.{2,}|…)$")
_SENTENCE_END_RE = re.compile(r"[.!?][\"'»”]?$")
_TRAILING_QUOTES_RE = re.compile(r"[\"'»”]+$")
_MULTI_PERIOD_ABBR_RE = re.compile(r"^[a-zA-Z]\.([a-zA-Z]\.)+$")


@dataclass(frozen=True)
class WordToken:
    text: str
    start_index: int
    end_index: int
    pause_multiplier: float
    is_end_of_sentence: bool


@dataclass(frozen=True)
class RSVPToken:
    text: str
    pause_multiplier: float
    is_end_of_sentence: bool
    is_end_of_paragraph: bool

    @property
    def word_count(self) -> int:
        return get_word_count(self.text)


def get_word_count(text: str) -> int:
    if not text:
        return 0
    return len(text.split())


def estimate_reading_time(text: str, wpm: int) -> float:
    """Minutes needed to read `text` at `wpm` words per minute."""
    if wpm <= 0:
        return 0.0
    return get_word_count(text) / wpm


def is_abbreviation(word: str) -> bool:
    cleaned = word.rstrip(".").lower()
    if cleaned in ABBREVIATIONS:
        return True
    # initials such as "J."
    if len(cleaned) == 1 and cleaned.isalpha():
        return True
    bare = word[:-1] if word.endswith(".") else word
    if 1 <= len(bare) <= 2 and bare.isalpha() and bare.isupper():
        return True
    return bool(_MULTI_PERIOD_ABBR_RE.match(word))


def is_transition_word(word: str) -> bool:
    return re.sub(r"[,;:]", "", word).lower() in TRANSITION_WORDS


def get_pause_multiplier(text: str) -> Tuple[float, bool]:
    """
    Return `(multiplier, is_end_of_sentence)` for a word based on its trailing
    punctuation.
    """
    word = text.strip()
    if not word:
        return Pause.NONE, False

    if _ELLIPSIS_RE.search(word):
        return Pause.ELLIPSIS, True

    if _SENTENCE_END_RE.search(word):
        word_part = _TRAILING_QUOTES_RE.sub("", word)
        if word_part.endswith(".") and is_abbreviation(word_part):
            return Pause.NONE, False
        if word_part.endswith("?"):
            return Pause.QUESTION, True
        if word_part.endswith("!"):
            return Pause.EXCLAMATION, True
        return Pause.SENTENCE_END, True

    if word[-1] in ")]":
        return Pause.CLOSE_PAREN, False
    if word[-1] in "\"'»”" and word[0] not in "\"'«“":
        return Pause.CLOSE_QUOTE, False
    if word.endswith(";"):
        return Pause.SEMICOLON, False
    if word.endswith(":"):
        return Pause.COLON, False
    if word.endswith(","):
        if is_transition_word(word[:-1]):
            return Pause.COMMA + 0.2, False
        return Pause.COMMA, False
    if word[-1] in "-–—":
        return Pause.DASH, False
    if is_transition_word(word):
        return Pause.TRANSITION, False
    return Pause.NONE, False


def tokenize_into_words(text: str) -> List[WordToken]:
    tokens: List[WordToken] = []
    for match in _WORD_RE.finditer(text or ""):
        multiplier, end_of_sentence = get_pause_multiplier(match.group(0))
        tokens.append(
            WordToken(
                text=match.group(0),
                start_index=match.start(),
                end_index=match.end(),
                pause_multiplier=multiplier,
                is_end_of_sentence=end_of_sentence,
            )
        )
    return tokens


def tokenize_for_rsvp(text: str, chunk_size: int = 1) -> List[RSVPToken]:
    """
    Split text into RSVP flashes of `chunk_size` words. Chunks never span a
    paragraph break (a blank line), so the last chunk of a paragraph may be
    shorter than `chunk_size`.
    """
    chunk_size = max(1, chunk_size)
    paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text or "")]
    paragraphs = [p for p in paragraphs if p]
    tokens: List[RSVPToken] = []

    for p_index, paragraph in enumerate(paragraphs):
        words = paragraph.split()
        for start in range(0, len(words), chunk_size):
            chunk = words[start : start + chunk_size]
            multiplier, end_of_sentence = get_pause_multiplier(chunk[-1])
            end_of_paragraph = start + chunk_size >= len(words) and p_index < len(paragraphs) - 1
            if end_of_paragraph:
                multiplier = max(multiplier, Pause.PARAGRAPH_END)
            tokens.append(
                RSVPToken(
                    text=" ".join(chunk),
                    pause_multiplier=multiplier,
                    is_end_of_sentence=end_of_sentence,
                    is_end_of_paragraph=end_of_paragraph,
                )
            )
    return tokens


def calculate_token_duration(token: RSVPToken, wpm: int, pause_on_punctuation: bool) -> float:
    """Display time of an RSVP token in milliseconds."""
    base_ms = 60000 / wpm
    duration = base_ms * max(1, token.word_count)
    if pause_on_punctuation:
        duration *= token.pause_multiplier
    return duration


def find_orp(word: str) -> int:
    """Index of the optimal recognition point, roughly a third into the word."""
    clean = re.sub(r"[^\w]", "", word)
    if len(clean) <= 1:
        return 0
    if len(clean) <= 5:
        return 1
    return int(len(clean) * 0.3)
