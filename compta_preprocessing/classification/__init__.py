from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.classifier import StructureClassifier
from compta_preprocessing.classification.factory import ClassifierFactory
from compta_preprocessing.classification.keyword_classifier import KeywordStructureClassifier
from compta_preprocessing.classification.models import (
    DocumentStructureAnalysis,
    PageClassification,
    StatementType,
)
from compta_preprocessing.classification.page_classifier import PageByPageClassifier

__all__ = [
    "BaseStructureClassifier",
    "ClassifierFactory",
    "DocumentStructureAnalysis",
    "KeywordStructureClassifier",
    "PageByPageClassifier",
    "PageClassification",
    "StatementType",
    "StructureClassifier",
]
