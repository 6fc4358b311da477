"""Rule-based classifiers scoring document metadata against fixed tables."""

import re

from linkshelf.classification.base import BaseClassifier
from linkshelf.classification.models import KeywordRule, PatternRule
from linkshelf.classification.rules import UNKNOWN_CATEGORY
from linkshelf.classification.text import metadata_parts
from linkshelf.database.models import CategoryAssignment, Document

MIN_PATTERN_SCORE = 0.1


def extract_domain(url: str | None) -> str:
    """Host part of a URL without scheme, leading ``www.`` or path."""
    if not url:
        return ""
    domain = re.sub(r"^https?://", "", url.strip(), flags=re.IGNORECASE)
    domain = re.sub(r"^www\.", "", domain, flags=re.IGNORECASE)
    domain = re.sub(r"/.*$", "", domain)
    return domain.lower()


def pattern_score(content: str, patterns: tuple[re.Pattern[str], ...]) -> float:
    """Blend of match density and absolute match count, in [0, 1] for typical input."""
    total_matches = sum(len(pattern.findall(content)) for pattern in patterns)
    word_count = len(content.split())
    density = total_matches / max(word_count, 1)
    absolute = min(total_matches * 0.1, 1.0)
    return max(density * 2, absolute)


class PatternDensityClassifier(BaseClassifier):
    """Picks the single category whose patterns match the metadata most densely.

    Falls back to ``Unknown`` with full confidence when no category reaches
    MIN_PATTERN_SCORE, so exactly one assignment is always returned.
    """

    name = "enhanced-rule-based"

    def __init__(self, rules: tuple[PatternRule, ...]) -> None:
        self._rules = rules

    def classify(self, document: Document, text: str | None = None) -> list[CategoryAssignment]:
        content = " ".join(metadata_parts(document)).lower()

        best_category = UNKNOWN_CATEGORY
        best_score = 0.0
        for rule in self._rules:
            score = pattern_score(content, rule.patterns)
            if score > best_score:
                best_category, best_score = rule.category, score

        if best_score < MIN_PATTERN_SCORE:
            best_category, best_score = UNKNOWN_CATEGORY, 1.0

        return [CategoryAssignment(best_category, min(best_score, 1.0), self.tag)]


class KeywordDomainClassifier(BaseClassifier):
    """Scores every category by keyword coverage (70%) and trusted domain (30%)."""

    name = "rule-based"

    KEYWORD_WEIGHT = 0.7
    DOMAIN_WEIGHT = 0.3

    def __init__(self, rules: tuple[KeywordRule, ...], confidence_threshold: float = 0.7) -> None:
        self._rules = rules
        self._confidence_threshold = confidence_threshold

    def classify(self, document: Document, text: str | None = None) -> list[CategoryAssignment]:
        parts = metadata_parts(document)
        if document.url:
            parts.append(document.url)
        content = " ".join(parts).lower()
        domain = extract_domain(document.url)

        assignments = []
        for rule in self._rules:
            confidence = self.score(rule, content, domain)
            if confidence >= self._confidence_threshold:
                assignments.append(CategoryAssignment(rule.category, confidence, self.tag))
        assignments.sort(key=lambda a: a.confidence, reverse=True)
        return assignments

    def score(self, rule: KeywordRule, content: str, domain: str) -> float:
        keyword_score = 0.0
        if rule.keywords:
            matched = sum(1 for keyword in rule.keywords if keyword in content)
            keyword_score = matched / len(rule.keywords)

        domain_score = 0.0
        if domain and any(listed in domain for listed in rule.domains):
            domain_score = 1.0

        return keyword_score * self.KEYWORD_WEIGHT + domain_score * self.DOMAIN_WEIGHT
