"""Default heuristic rule tables and the JSON override loader."""

import json
import re
from pathlib import Path
from typing import Any

from linkshelf.classification.exceptions import RulesLoadError
from linkshelf.classification.models import KeywordRule, PatternRule, RuleSet

UNKNOWN_CATEGORY = "Unknown"

_DEFAULT_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Technology",
        (
            r"\b(software|programming|developer|coding|algorithm|javascript|python|java|react"
            r"|angular|vue|node\.js|api|database|cloud|aws|azure|docker|kubernetes"
            r"|artificial intelligence|machine learning|ai|ml|blockchain|cryptocurrency"
            r"|bitcoin|ethereum)\b",
            r"\b(github|stackoverflow|tech|technology|framework|library|open source|backend"
            r"|frontend|fullstack|devops|ci/cd|microservices|rest|graphql)\b",
        ),
    ),
    (
        "Newspaper Article",
        (
            r"\b(breaking|news|reported|journalist|correspondent|reuters|associated press|cnn"
            r"|bbc|times|post|herald|tribune|gazette|today|daily)\b",
            r"\b(politics|government|election|president|minister|congress|parliament|senate"
            r"|house|policy|legislation|investigation)\b",
            r"\b(according to sources|officials said|statement|press conference|interview"
            r"|exclusive|developing story)\b",
        ),
    ),
    (
        "Technology Update",
        (
            r"\b(update|upgrade|release|version|patch|changelog|new features|announcement"
            r"|launched|beta|alpha|rollout)\b",
            r"\b(apple|google|microsoft|facebook|meta|amazon|tesla|spotify|netflix|uber"
            r"|twitter|instagram|tiktok|whatsapp)\b",
            r"\b(ios|android|windows|mac|chrome|firefox|safari|edge|app store|play store"
            r"|product launch|keynote)\b",
        ),
    ),
    (
        "Simple Article",
        (
            r"\b(how to|guide|tutorial|tips|advice|learn|beginner|step by step|introduction"
            r"|overview|basics)\b",
            r"\b(blog|article|post|content|writing|author|published|lifestyle|health|travel"
            r"|food|culture|sports|entertainment)\b",
            r"\b(opinion|review|analysis|commentary|thoughts|perspective|experience|personal"
            r"|story|essay)\b",
        ),
    ),
)

_DEFAULT_KEYWORDS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "finance",
        (
            "bank", "banking", "finance", "financial", "investment", "money",
            "loan", "credit", "debt", "mortgage", "insurance", "trading",
            "stocks", "portfolio", "crypto", "cryptocurrency", "bitcoin",
        ),
        (
            "bloomberg.com", "cnbc.com", "marketwatch.com", "wsj.com",
            "investing.com", "yahoo.com/finance",
        ),
    ),
    (
        "technology",
        (
            "technology", "tech", "software", "programming", "development",
            "coding", "computer", "ai", "artificial intelligence", "machine learning",
            "cloud", "api", "database", "framework", "javascript", "python", "java",
        ),
        (
            "github.com", "stackoverflow.com", "techcrunch.com", "wired.com",
            "ars-technica.com", "theverge.com", "hacker-news.com",
        ),
    ),
    (
        "news",
        (
            "news", "breaking", "report", "article", "journalism", "politics",
            "government", "election", "policy", "current events",
        ),
        (
            "cnn.com", "bbc.com", "reuters.com", "ap.org", "nytimes.com",
            "washingtonpost.com", "theguardian.com",
        ),
    ),
    (
        "science",
        (
            "science", "research", "study", "experiment", "biology", "chemistry",
            "physics", "medicine", "health", "medical", "scientific",
        ),
        (),
    ),
    (
        "business",
        (
            "business", "company", "corporate", "enterprise", "startup",
            "entrepreneur", "management", "strategy", "marketing", "sales",
        ),
        (),
    ),
)

_CATEGORY_DESCRIPTIONS = {
    "technology": "Documents related to technology, programming, software development, and tech news",
    "technology update": "Latest technology updates, product launches, and software releases",
    "newspaper article": "News articles, breaking news, and current events",
    "simple article": "General articles, blog posts, tutorials, and guides",
    "unknown": "Uncategorized documents",
}


def describe_category(name: str) -> str:
    """Default catalog description for a category name."""
    return _CATEGORY_DESCRIPTIONS.get(name.lower(), f"Documents categorized as {name}")


def pattern_rule(category: str, patterns: list[str] | tuple[str, ...]) -> PatternRule:
    try:
        compiled = tuple(re.compile(p, re.IGNORECASE) for p in patterns)
    except re.error as exc:
        raise RulesLoadError(f"Invalid pattern for category '{category}': {exc}") from exc
    return PatternRule(category=category, patterns=compiled)


def keyword_rule(
    category: str,
    keywords: list[str] | tuple[str, ...],
    domains: list[str] | tuple[str, ...] = (),
) -> KeywordRule:
    return KeywordRule(
        category=category,
        keywords=tuple(k.lower() for k in keywords),
        domains=tuple(d.lower() for d in domains),
    )


def default_rules() -> RuleSet:
    return RuleSet(
        pattern_rules=tuple(pattern_rule(c, p) for c, p in _DEFAULT_PATTERNS),
        keyword_rules=tuple(keyword_rule(c, k, d) for c, k, d in _DEFAULT_KEYWORDS),
    )


def load_rules(path: Path | None = None) -> RuleSet:
    """Load rule tables from a JSON file, or return the defaults when path is None.

    The file may define ``pattern_rules`` and/or ``keyword_rules``; a missing
    section keeps its defaults::

        {
          "pattern_rules": [{"category": "Recipes", "patterns": ["\\\\b(recipe|bake)\\\\b"]}],
          "keyword_rules": [{"category": "cooking", "keywords": ["oven"], "domains": ["food.com"]}]
        }

    Raises:
        RulesLoadError: if the file cannot be read or has the wrong shape.
    """
    defaults = default_rules()
    if path is None:
        return defaults
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RulesLoadError(f"Failed to load classification rules from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesLoadError("Classification rules file must contain a JSON object")

    pattern_rules = defaults.pattern_rules
    if "pattern_rules" in data:
        pattern_rules = tuple(
            pattern_rule(item["category"], item["patterns"])
            for item in _require_list(data["pattern_rules"], "pattern_rules", ("category", "patterns"))
        )
    keyword_rules = defaults.keyword_rules
    if "keyword_rules" in data:
        keyword_rules = tuple(
            keyword_rule(item["category"], item["keywords"], item.get("domains", []))
            for item in _require_list(data["keyword_rules"], "keyword_rules", ("category", "keywords"))
        )
    return RuleSet(pattern_rules=pattern_rules, keyword_rules=keyword_rules)


def _require_list(raw: Any, section: str, required: tuple[str, ...]) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        raise RulesLoadError(f"'{section}' must be a list")
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise RulesLoadError(f"'{section}[{i}]' must be an object")
        for key in required:
            if key not in item:
                raise RulesLoadError(f"'{section}[{i}]' is missing '{key}'")
        if not item["category"] or not isinstance(item["category"], str):
            raise RulesLoadError(f"'{section}[{i}].category' must be a non-empty string")
        for key in (*required[1:], "domains"):
            if key in item and not isinstance(item[key], list):
                raise RulesLoadError(f"'{section}[{i}].{key}' must be a list")
    return raw
