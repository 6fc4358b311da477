import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PatternRule:
    """Regex alternations that signal one category."""

    category: str
    patterns: tuple[re.Pattern[str], ...]


@dataclass(frozen=True)
class KeywordRule:
    """Keywords and trusted domains that signal one category."""

    category: str
    keywords: tuple[str, ...]
    domains: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleSet:
    pattern_rules: tuple[PatternRule, ...]
    keyword_rules: tuple[KeywordRule, ...]


@dataclass(frozen=True)
class TfidfModel:
    """Trained TF-IDF state. Never mutated after construction; train() builds a new one."""

    vocabulary: dict[str, int] = field(default_factory=dict)
    inverse_document_frequency: dict[str, float] = field(default_factory=dict)
    category_vectors: dict[str, dict[str, float]] = field(default_factory=dict)
    trained: bool = False

    @property
    def categories(self) -> list[str]:
        return sorted(self.category_vectors)


@dataclass(frozen=True)
class TrainingReport:
    """Summary of a completed training run."""

    documents_processed: int
    documents_skipped: int
    categories: list[str]
    vocabulary_size: int
