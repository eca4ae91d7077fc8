# spamtree/__init__.py
"""
spamtree: Gini decision trees for spam filtering in pure Python.

Exports:
    - build / TreeBuilder / Hyperparameters / Tree
    - predict / predict_all
    - confusion_matrix / confusion_table / metrics
    - build_model / evaluate / ModelSession
    - SpamTreeClassifier (scikit-learn style)
"""
from loguru import logger

from .classifier import SpamTreeClassifier
from .dataset import Dataset, FeatureRecord, load_dataset
from .exceptions import (
    ConfigurationError,
    DegenerateMetricError,
    EmptyDatasetError,
    MissingFeatureError,
    SpamTreeError,
)
from .logging import PACKAGE_NAME, enable_logging
from .predictor import PredictionRecord, predict, predict_all
from .scoring import UNDEFINED, ConfusionMatrix, Metrics, confusion_matrix, confusion_table, metrics
from .session import Evaluation, ModelSession, build_model, evaluate
from .tree import ClassCounts, DecisionNode, Hyperparameters, LeafNode, Tree, TreeBuilder, build

logger.disable(PACKAGE_NAME)

__all__ = [
    "ClassCounts",
    "ConfigurationError",
    "ConfusionMatrix",
    "Dataset",
    "DecisionNode",
    "DegenerateMetricError",
    "EmptyDatasetError",
    "Evaluation",
    "FeatureRecord",
    "Hyperparameters",
    "LeafNode",
    "Metrics",
    "MissingFeatureError",
    "ModelSession",
    "PredictionRecord",
    "SpamTreeClassifier",
    "SpamTreeError",
    "Tree",
    "TreeBuilder",
    "UNDEFINED",
    "build",
    "build_model",
    "confusion_matrix",
    "confusion_table",
    "enable_logging",
    "evaluate",
    "load_dataset",
    "metrics",
    "predict",
    "predict_all",
]
__version__ = "0.1.0"
