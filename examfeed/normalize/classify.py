from __future__ import annotations

import re
from typing import Optional

from examfeed.normalize.schema import (
    ADMIT_CARD,
    ANSWER_KEY,
    CHANNELS,
    CUTOFF,
    JOBS,
    NEWS,
    NOTIFICATION,
    RESULT,
    UNCLASSIFIED,
)

# Evaluated top to bottom, first match wins: "Result cum Notification" is a result.
CHANNEL_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(?:admit[-\s]?cards?|hall[-\s]?tickets?|call[-\s]?letters?)\b", re.IGNORECASE), ADMIT_CARD),
    (re.compile(r"\b(?:results?|merit[-\s]lists?|final[-\s]selection|score[-\s]?cards?)\b", re.IGNORECASE), RESULT),
    (
        re.compile(r"\b(?:notifications?|releases?|released|announces?|announced|corrigend(?:um|a))\b", re.IGNORECASE),
        NOTIFICATION,
    ),
    (
        re.compile(r"\b(?:recruitments?|vacanc(?:y|ies)|apply\s+online|application\s+forms?|jobs?)\b", re.IGNORECASE),
        JOBS,
    ),
    (re.compile(r"\b(?:answer[-\s]?keys?|response[-\s]?keys?|response\s+sheets?)\b", re.IGNORECASE), ANSWER_KEY),
    (re.compile(r"\bcut[-\s]?offs?\b", re.IGNORECASE), CUTOFF),
)

# Matched against uppercased text; every match is kept.
CATEGORY_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bJE\b|JUNIOR ENGINEER"), "JE"),
    (re.compile(r"\bCHSL\b"), "CHSL"),
    (re.compile(r"\bSTENO\b|STENOGRAPHER"), "STENO"),
    (re.compile(r"\bCGL\b"), "CGL"),
    (re.compile(r"\bMTS\b"), "MTS"),
    (re.compile(r"\bCAPF\b"), "CAPF"),
    (re.compile(r"\bCPO\b"), "CPO"),
    (re.compile(r"\bGD\b"), "GD"),
    (re.compile(r"\bDEPARTMENTAL\b"), "DEPARTMENTAL"),
    (re.compile(r"\bSELECTION POSTS?\b"), "SELECTION-POST"),
)


def coerce_channel(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip().lower()
    if not cleaned:
        return None
    return cleaned if cleaned in CHANNELS else UNCLASSIFIED


def classify_channel(title: Optional[str], fallback: Optional[str] = None) -> str:
    text = title or ""
    for pattern, channel in CHANNEL_RULES:
        if pattern.search(text):
            return channel
    return coerce_channel(fallback) or NEWS


def extract_categories(text: Optional[str]) -> list[str]:
    upper = (text or "").upper()
    return [tag for pattern, tag in CATEGORY_RULES if pattern.search(upper)]
