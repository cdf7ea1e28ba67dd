"""LexiBayes: named, incrementally trainable Naive Bayes text classifiers.

Provides:
- A lifecycle manager that resolves classifiers from an in-process cache,
  a filesystem store or an S3 bucket, creating them on first use
- Training augmentation (tokenized and character-shuffled variants)
- Text preprocessing: stop words, special characters, POS-tag entity merging

Quick Start:
    >>> from lexibayes import ClassifierManager, FileSystemBackend, Trainer, TrainingDocument, TrainingOptions
    >>>
    >>> manager = ClassifierManager(fs_backend=FileSystemBackend("./models"))
    >>> classifier = await manager.get_or_create("intents", "fs")
    >>>
    >>> # Expand and train
    >>> trainer = Trainer(manager.cache)
    >>> trainer.train_batch([
    ...     TrainingDocument(["book a flight"], ["travel"], TrainingOptions(tokenize=True)),
    ...     TrainingDocument(["pay my bill"], ["billing"], TrainingOptions(shuffle=True)),
    ... ], "intents")
    >>>
    >>> # Persist and classify
    >>> await manager.set("intents", classifier, upload=True, destination="fs")
    >>> label = await manager.classify("flight to Paris", classifier=classifier)
"""

__version__ = "0.1.0"

from .config import get_settings, Settings
from .logging_utils import configure_logging

from .backends import BackendKind, BlobBackend, FileSystemBackend
from .bayes import BayesClassifier, Classification, score_probability
from .cache import ClassifierCache
from .entities import POSHandlerResult, TaggedToken, merge_entities
from .manager import ClassifierManager, ResponseMode
from .preprocessing import InMemoryStopWordStore, TextPreprocessor, clean_special_characters
from .similarity import closest_strings, string_distances
from .tokenization import AggressiveTokenizer, TokenizerKind, WordTokenizer, create_tokenizer
from .training import (
    Trainer,
    TrainingDocument,
    TrainingOptions,
    augment_document,
    char_shuffle,
    create_training_set,
)

__all__ = [
    "__version__",
    "get_settings",
    "Settings",
    "configure_logging",
    "BackendKind",
    "BlobBackend",
    "FileSystemBackend",
    "BayesClassifier",
    "Classification",
    "score_probability",
    "ClassifierCache",
    "POSHandlerResult",
    "TaggedToken",
    "merge_entities",
    "ClassifierManager",
    "ResponseMode",
    "InMemoryStopWordStore",
    "TextPreprocessor",
    "clean_special_characters",
    "closest_strings",
    "string_distances",
    "AggressiveTokenizer",
    "TokenizerKind",
    "WordTokenizer",
    "create_tokenizer",
    "Trainer",
    "TrainingDocument",
    "TrainingOptions",
    "augment_document",
    "char_shuffle",
    "create_training_set",
]
