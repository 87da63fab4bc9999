"""
Cheap synchronous screen for input that is not a checkable claim.

Rule groups are evaluated in order and the first match wins. Anything that
matches nothing is treated as a claim, so verification is the default.
"""
import re
from typing import List, Pattern, Tuple

from lora.config import PERSONAL_FILTER_CONFIG
from lora.config.constants import PersonalFilterConfig
from lora.models.claims import PersonalCheck

_RELATIONS = r"(girlfriend|boyfriend|wife|husband|partner|friend|mom|dad|mother|father|sister|brother|family|dog|cat|boss|coworker)"
_FEELINGS = r"(happy|sad|angry|excited|nervous|anxious|scared|worried|tired|exhausted|confused|frustrated|grateful|thankful|blessed|lucky)"

ANECDOTAL_PATTERNS = [
    re.compile(rf"^my {_RELATIONS}\b"),
    re.compile(r"\bmy (girlfriend|boyfriend|wife|husband|partner|mom|dad) .*\b(bought|gave|told|asked|showed|sent|made)\b"),
    re.compile(r"^(i|we) (just|recently|finally|actually)\b"),
    re.compile(r"^(today|yesterday) (i|we|my)\b"),
    re.compile(r"^last (night|week|month|year) (i|we|my)\b"),
    re.compile(r"^(i|we) (went|saw|met|had|got|made|did|tried|bought|found|learned|discovered)\b"),
    re.compile(r"\b(told|asked|gave|bought|showed|sent) me\b"),
    re.compile(r"^(so basically|you know what|guess what)\b"),
]

EMOTIONAL_PATTERNS = [
    re.compile(rf"^i('m| am) (so |really |very )?{_FEELINGS}\b"),
    re.compile(r"^i (feel|felt)\b"),
    re.compile(r"\bi('m| am) feeling\b"),
    re.compile(r"\b(made my day|broke my heart|i love this|i hate this|i miss|i wish)\b"),
    re.compile(r"\bfeeling (good|bad|great|terrible|amazing|awful|sad|happy)\b"),
    re.compile(r"^(omg|oh my god|wtf|lol|lmao|haha|bruh|bro|dude)\b"),
    re.compile(r"\bi can'?t believe\b"),
]

NON_CLAIM_PATTERNS = [
    re.compile(r"^(lol|lmao|haha|hehe)+$"),
    re.compile(r"^[\U0001F300-\U0001FAFF☀-➿\s]+$"),
    re.compile(r"^[^\w]*$"),
    re.compile(r"^(hi|hey|hello|sup|yo|what's up)\b"),
    re.compile(r"^(thanks|thank you|thx|ty)\b"),
    re.compile(r"^(ok|okay|k|sure|yeah|yep|nope|nah)$"),
    re.compile(r"^(good morning|good night|gn|gm)\b"),
]

OPINION_PATTERNS = [
    re.compile(r"^(i think|i believe|in my opinion|imo|personally|i prefer)\b"),
    re.compile(r"^i (like|love|hate)\b"),
    re.compile(r"\bis (the )?(best|worst|overrated|underrated)\b"),
    re.compile(r"^(do you think|what do you think|thoughts\?)"),
]

RULES: List[Tuple[str, int, List[Pattern]]] = [
    ("anecdotal/personal story", 85, ANECDOTAL_PATTERNS),
    ("emotional expression", 80, EMOTIONAL_PATTERNS),
    ("non-factual content", 90, NON_CLAIM_PATTERNS),
    ("subjective opinion", 75, OPINION_PATTERNS),
]


class PersonalStatementFilter:
    def __init__(self, config: PersonalFilterConfig = PERSONAL_FILTER_CONFIG):
        self.config = config

    def check(self, text) -> PersonalCheck:
        if not isinstance(text, str):
            return PersonalCheck(True, "invalid input", 100)

        lower = text.lower().strip().replace("’", "'")
        if not lower:
            return PersonalCheck(True, "empty input", 100)
        if len(lower) < self.config.MIN_CLAIM_LENGTH:
            return PersonalCheck(True, "too short to be a factual claim", 80)

        for reason, confidence, patterns in RULES:
            if any(p.search(lower) for p in patterns):
                return PersonalCheck(True, reason, confidence)

        return PersonalCheck(False, "appears to be a factual claim", 70)


def detect_personal_statement(text) -> PersonalCheck:
    return PersonalStatementFilter().check(text)
