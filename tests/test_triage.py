"""Tests for the triage keyword tables."""

import pytest

from mediconnect.tools.triage import (
    EMERGENCY_KEYWORDS,
    MAJOR_CONDITIONS,
    MINOR_CONDITIONS,
    Severity,
    contains_keyword,
    get_all_keywords,
    is_emergency,
    match_triage_hint,
    match_triage_keyword,
)


class TestMatchTriageHint:
    @pytest.mark.parametrize("text", [
        "I have chest pain when climbing stairs",
        "Shortness of breath since this morning",
        "I've had a persistent fever all week",
    ])
    def test_major_conditions(self, text):
        hint = match_triage_hint(text)
        assert hint is not None
        assert hint.severity == Severity.MAJOR
        assert hint.offer_booking

    @pytest.mark.parametrize("text", [
        "I have a runny nose and sneezing",
        "my throat is scratchy, a sore throat really",
        "just feeling tired lately",
    ])
    def test_minor_conditions(self, text):
        hint = match_triage_hint(text)
        assert hint is not None
        assert hint.severity == Severity.MINOR

    def test_major_checked_before_minor(self):
        hint = match_triage_hint("I have a severe headache, not a mild headache")
        assert hint.severity == Severity.MAJOR

    def test_case_insensitive(self):
        assert match_triage_hint("CHEST PAIN") is not None

    @pytest.mark.parametrize("text", [
        "Slurred speech and facial drooping",
        "I keep having suicidal thoughts",
    ])
    def test_emergencies_do_not_offer_booking(self, text):
        hint = match_triage_hint(text)
        assert hint.severity == Severity.MAJOR
        assert not hint.offer_booking

    def test_no_match(self):
        assert match_triage_hint("I'd like to know your opening hours") is None


class TestKeywordTables:
    def test_all_keywords_major_first(self):
        keywords = get_all_keywords()
        assert keywords[0] == MAJOR_CONDITIONS[0].keywords[0]
        assert keywords[-1] == MINOR_CONDITIONS[-1].keywords[-1]

    def test_keywords_are_lowercase(self):
        assert all(kw == kw.lower() for kw in get_all_keywords())

    def test_every_hint_has_guidance(self):
        for hint in MAJOR_CONDITIONS + MINOR_CONDITIONS:
            assert hint.keywords
            assert hint.response


class TestWholeWordMatching:
    @pytest.mark.parametrize("text", [
        "I got scolded at work today",
        "I retired last spring",
        "It is getting colder outside",
    ])
    def test_keyword_inside_a_longer_word_does_not_match(self, text):
        assert match_triage_hint(text) is None

    def test_contains_keyword(self):
        assert contains_keyword("I caught a Cold.", "cold")
        assert not contains_keyword("I got scolded", "cold")
        assert contains_keyword("I can't breathe!", "can't breathe")

    def test_matched_keyword_is_returned(self):
        hint, keyword = match_triage_keyword("Sneezing all day")
        assert keyword == "sneezing"
        assert hint.severity == Severity.MINOR

    def test_no_keyword_match(self):
        assert match_triage_keyword("What are your opening hours?") is None


class TestIsEmergency:
    @pytest.mark.parametrize("text", [
        "I have chest pain",
        "Shortness of breath since this morning",
        "He has slurred speech",
        "I keep having suicidal thoughts",
    ])
    def test_emergency_symptoms(self, text):
        assert is_emergency(text)

    @pytest.mark.parametrize("text", [
        "I have a runny nose",
        "severe headache since yesterday",
        "I had a persistent fever",
    ])
    def test_non_emergencies(self, text):
        assert not is_emergency(text)

    def test_emergency_keywords_are_lowercase(self):
        assert all(kw == kw.lower() for kw in EMERGENCY_KEYWORDS)
