from pathlib import Path

from linkshelf.classification.ensemble import ClassificationEnsemble
from linkshelf.classification.heuristic import KeywordDomainClassifier, PatternDensityClassifier
from linkshelf.classification.model_store import ModelStore
from linkshelf.classification.rules import default_rules, load_rules
from linkshelf.classification.text import DocumentTextSource
from linkshelf.classification.tfidf import TfidfClassifier
from linkshelf.config.settings import Settings
from linkshelf.remote.base import BaseRemoteClassifier
from linkshelf.remote.factory import RemoteClassifierFactory


class ClassifierFactory:
    """Builds the classification ensemble from application settings."""

    @classmethod
    def create(
        cls,
        settings: Settings,
        text_source: DocumentTextSource,
        remote: BaseRemoteClassifier | None = None,
    ) -> ClassificationEnsemble:
        rules_path = settings.classification_rules_path.strip()
        rules = load_rules(Path(rules_path)) if rules_path else default_rules()

        statistical = TfidfClassifier(
            text_source=text_source,
            model_store=ModelStore(Path(settings.ml_model_path)),
            enabled=settings.ml_enabled,
            confidence_threshold=settings.ml_confidence_threshold,
            min_document_frequency=settings.ml_min_document_frequency,
            max_features=settings.ml_max_features,
        )
        if settings.ml_enabled:
            statistical.load_model()

        if remote is None:
            remote = RemoteClassifierFactory.create(settings)

        return ClassificationEnsemble(
            text_source=text_source,
            statistical=statistical,
            pattern=PatternDensityClassifier(rules.pattern_rules),
            keyword=KeywordDomainClassifier(
                rules.keyword_rules,
                confidence_threshold=settings.keyword_confidence_threshold,
            ),
            remote=remote,
        )
