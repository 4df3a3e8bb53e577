"""Keyword reference tables for supplementary triage hints."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class TriageHint:
    """One keyword set mapped to canned guidance."""

    keywords: tuple[str, ...]
    response: str
    offer_booking: bool
    severity: Severity


MAJOR_CONDITIONS: tuple[TriageHint, ...] = (
    TriageHint(
        keywords=("chest pain", "pain in chest", "heart attack symptom", "angina"),
        response=(
            "Chest pain can be a sign of a serious condition and should not be ignored. "
            "It's very important to seek immediate medical attention. Would you like "
            "assistance finding emergency services or shall I help you book an urgent "
            "appointment with one of our specialists?"
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("difficulty breathing", "shortness of breath", "can't breathe",
                  "breathing trouble"),
        response=(
            "Difficulty breathing is a serious symptom that requires prompt medical "
            "evaluation. Please seek medical help urgently. Can I help you book an "
            "appointment, or do you need information on emergency services?"
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("severe headache", "migraine", "worst headache ever",
                  "sudden severe headache"),
        response=(
            "A sudden, severe headache, or a headache that's very different from what "
            "you usually experience, needs to be checked by a doctor. This could be "
            "serious. Would you like to book an appointment?"
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("severe abdominal pain", "intense stomach pain", "stomach cramps severe"),
        response=(
            "Severe abdominal pain can have many causes, some of which require urgent "
            "medical care. It's best to get this evaluated by a doctor. Can I assist you "
            "with booking an appointment?"
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("unexplained weight loss", "losing weight rapidly"),
        response=(
            "Significant unexplained weight loss should always be investigated by a "
            "doctor to understand the cause. Would you like to schedule a consultation?"
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("high fever", "fever over 103", "fever 39.5", "persistent fever"),
        response=(
            "A high or persistent fever needs medical attention to determine the cause "
            "and appropriate treatment. I can help you book an appointment to see a doctor."
        ),
        offer_booking=True,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("numbness", "weakness on one side", "slurred speech", "stroke symptoms",
                  "facial drooping"),
        response=(
            "Symptoms like numbness, weakness on one side of the body, or slurred speech "
            "could indicate a very serious condition like a stroke and require immediate "
            "emergency medical care. Please call emergency services (like 911 or your "
            "local equivalent) right away."
        ),
        # Emergency care, not an appointment.
        offer_booking=False,
        severity=Severity.MAJOR,
    ),
    TriageHint(
        keywords=("suicidal thoughts", "want to harm myself",
                  "feeling hopeless and want to die"),
        response=(
            "I'm truly sorry to hear you're feeling this way. Please know that you're "
            "not alone and help is available. It's important to talk to someone right "
            "now. You can reach out to a crisis hotline or mental health professional. "
            "For immediate help, please contact a crisis line or emergency services. "
            "This is beyond my ability to help with directly, but your well-being is "
            "very important."
        ),
        offer_booking=False,
        severity=Severity.MAJOR,
    ),
)

MINOR_CONDITIONS: tuple[TriageHint, ...] = (
    TriageHint(
        keywords=("cold", "common cold", "runny nose", "sneezing", "slight cough"),
        response=(
            "For symptoms like a common cold, getting plenty of rest and staying "
            "hydrated often helps. If your symptoms worsen or persist for more than a "
            "week, it's a good idea to consult a doctor."
        ),
        offer_booking=True,
        severity=Severity.MINOR,
    ),
    TriageHint(
        keywords=("sore throat", "scratchy throat"),
        response=(
            "A sore throat can be uncomfortable. Warm liquids like tea with honey, or "
            "gargling with salt water might provide some relief. If it's severe, lasts "
            "long, or you have a fever, please see a doctor."
        ),
        offer_booking=True,
        severity=Severity.MINOR,
    ),
    TriageHint(
        keywords=("mild headache", "slight headache", "head hurts a bit"),
        response=(
            "For a mild headache, resting in a quiet, dark room and ensuring you're "
            "hydrated can be beneficial. If headaches are frequent, severe, or "
            "accompanied by other symptoms, medical advice is recommended."
        ),
        offer_booking=True,
        severity=Severity.MINOR,
    ),
    TriageHint(
        keywords=("tired", "fatigued", "bit weary"),
        response=(
            "Feeling tired can be due to many reasons. Ensure you're getting enough "
            "sleep, managing stress, and maintaining a balanced diet. If fatigue is "
            "persistent and affects your daily life, consulting a doctor is advisable."
        ),
        offer_booking=True,
        severity=Severity.MINOR,
    ),
    TriageHint(
        keywords=("small cut", "minor scrape", "little scratch"),
        response=(
            "For minor cuts or scrapes, clean the area gently with soap and water, apply "
            "an antiseptic if you have one, and cover it with a sterile bandage. If it's "
            "deep, bleeds a lot, or shows signs of infection, please seek medical attention."
        ),
        offer_booking=True,
        severity=Severity.MINOR,
    ),
)


# Symptoms that call for emergency services rather than an appointment,
# whatever the matching hint offers.
EMERGENCY_KEYWORDS: tuple[str, ...] = (
    "chest pain", "pain in chest", "heart attack symptom",
    "difficulty breathing", "shortness of breath", "can't breathe", "breathing trouble",
    "stroke symptoms", "numbness", "weakness on one side", "slurred speech", "facial drooping",
    "severe bleeding", "loss of consciousness",
    "suicidal thoughts", "want to harm myself", "feeling hopeless and want to die",
)


def contains_keyword(text: str, keyword: str) -> bool:
    """Whole-word, case-insensitive keyword match."""
    return re.search(rf"\b{re.escape(keyword)}\b", text.lower()) is not None


def match_triage_keyword(text: str) -> Optional[tuple[TriageHint, str]]:
    """Return the first matching hint and the keyword that matched it.

    Major conditions are checked before minor ones, so "severe headache"
    never falls through to the mild headache entry.
    """
    for hint in MAJOR_CONDITIONS + MINOR_CONDITIONS:
        for keyword in hint.keywords:
            if contains_keyword(text, keyword):
                logger.debug("Triage hint matched on '%s' (%s)", keyword, hint.severity.value)
                return hint, keyword
    return None


def match_triage_hint(text: str) -> Optional[TriageHint]:
    """Return the first hint whose keywords appear in ``text``."""
    match = match_triage_keyword(text)
    return match[0] if match else None


def is_emergency(text: str) -> bool:
    return any(contains_keyword(text, kw) for kw in EMERGENCY_KEYWORDS)


def get_all_keywords() -> list[str]:
    """Return every keyword across both tables, major first."""
    return [kw for hint in MAJOR_CONDITIONS + MINOR_CONDITIONS for kw in hint.keywords]
