"""Training document augmentation.

A :class:`TrainingDocument` pairs every source value with every target value.
Each pair is fed to the classifier as-is, and :class:`TrainingOptions` adds
tokenized and character-shuffled variants of the source value so short or
misspelled inputs still land on the right label.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from .bayes import BayesClassifier
from .cache import ClassifierCache
from .config import get_settings
from .exceptions import ClassifierNotFoundError
from .interfaces import TokenizerProtocol
from .tokenization import TokenizerKind, create_tokenizer

logger = logging.getLogger(__name__)

T = TypeVar("T")
Shuffler = Callable[[str], str]


@dataclass(frozen=True)
class TrainingOptions:
    tokenize: bool = False
    tokenizer_options: TokenizerKind = TokenizerKind.AGGRESSIVE
    shuffle: bool = False
    shuffle_token: bool = False
    tokenize_shuffle: bool = False

    @property
    def needs_tokenizer(self) -> bool:
        return self.tokenize or self.tokenize_shuffle

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TrainingOptions":
        """Build options from snake_case or camelCase keys."""
        data = data or {}

        def pick(snake: str, camel: str, default: Any) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            tokenize=bool(pick("tokenize", "tokenize", False)),
            tokenizer_options=TokenizerKind(pick("tokenizer_options", "tokenizerOptions", None) or TokenizerKind.AGGRESSIVE),
            shuffle=bool(pick("shuffle", "shuffle", False)),
            shuffle_token=bool(pick("shuffle_token", "shuffleToken", False)),
            tokenize_shuffle=bool(pick("tokenize_shuffle", "tokenizeShuffle", False)),
        )


@dataclass(frozen=True)
class TrainingDocument:
    source_values: Tuple[str, ...] = ()
    target_values: Tuple[str, ...] = ()
    training_options: TrainingOptions = field(default_factory=TrainingOptions)

    def __post_init__(self) -> None:
        # Freeze caller lists so later mutation cannot change what gets trained
        object.__setattr__(self, "source_values", tuple(self.source_values or ()))
        object.__setattr__(self, "target_values", tuple(self.target_values or ()))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrainingDocument":
        options = data.get("training_options", data.get("trainingOptions"))
        return cls(
            source_values=data.get("source_values", data.get("sourceValues")) or (),
            target_values=data.get("target_values", data.get("targetValues")) or (),
            training_options=options if isinstance(options, TrainingOptions) else TrainingOptions.from_dict(options),
        )


def char_shuffle(text: str, rng: Optional[random.Random] = None) -> str:
    """Return ``text`` with its characters permuted uniformly (Fisher-Yates)."""
    chars = list(text)
    (rng or random).shuffle(chars)
    return "".join(chars)


def _token_pairs(
    tokens: Iterable[str], label: str, shuffle_token: bool, shuffle: Shuffler
) -> Iterator[Tuple[str, str]]:
    for token in tokens:
        yield (shuffle(token) if shuffle_token else token), label


def augment_document(
    document: TrainingDocument,
    tokenizer: Optional[TokenizerProtocol] = None,
    shuffle: Shuffler = char_shuffle,
) -> Iterator[Tuple[str, str]]:
    """Yield every ``(text, label)`` pair a training document expands to.

    Order per (source, target) pair: the pair itself, the source tokens, the
    shuffled source, then tokens of the shuffled source. Calling again
    restarts the sequence.
    """
    options = document.training_options
    if options.needs_tokenizer and tokenizer is None:
        tokenizer = create_tokenizer(options.tokenizer_options)

    for source in document.source_values:
        for target in document.target_values:
            yield source, target

            if options.tokenize:
                yield from _token_pairs(tokenizer.tokenize(source), target, options.shuffle_token, shuffle)

            if options.shuffle:
                shuffled = shuffle(source)
                yield shuffled, target
                if options.tokenize_shuffle:
                    yield from _token_pairs(tokenizer.tokenize(shuffled), target, options.shuffle_token, shuffle)


def create_training_set(population: Sequence[T], gap: int) -> List[T]:
    """Take every ``gap``-th element of ``population``, starting with the first."""
    if gap < 1:
        raise ValueError(f"gap must be >= 1, got {gap}")
    logger.debug("Population size: %d | gap: %d", len(population), gap)
    training_set = list(population[::gap])
    logger.info("Training set size for current batch: %d", len(training_set))
    return training_set


class Trainer:
    """Feeds augmented training documents into cached classifiers.

    The tokenizer is chosen by the first document that asks for tokenization
    and reused for the life of the trainer.
    """

    def __init__(self, cache: ClassifierCache, rng: Optional[random.Random] = None) -> None:
        self.cache = cache
        if rng is None:
            rng = random.Random(get_settings().shuffle_seed)
        self.rng = rng
        self.tokenizer: Optional[TokenizerProtocol] = None

        self._classifier_name: Optional[str] = None
        self._classifier: Optional[BayesClassifier] = None

    def shuffle(self, text: str) -> str:
        return char_shuffle(text, self.rng)

    def _tokenizer_for(self, options: TrainingOptions) -> Optional[TokenizerProtocol]:
        if self.tokenizer is None and options.needs_tokenizer:
            self.tokenizer = create_tokenizer(options.tokenizer_options)
            logger.debug("Using %s tokenizer", options.tokenizer_options.value)
        return self.tokenizer

    def _bind(self, classifier_name: str) -> BayesClassifier:
        if self._classifier is None or self._classifier_name != classifier_name:
            classifier = self.cache.get(classifier_name)
            if classifier is None:
                raise ClassifierNotFoundError(f"Classifier {classifier_name} is not loaded")
            self._classifier_name = classifier_name
            self._classifier = classifier
        return self._classifier

    def train_document(self, classifier: BayesClassifier, document: TrainingDocument) -> int:
        """Add every augmented pair of ``document`` to ``classifier``; returns the count added."""
        tokenizer = self._tokenizer_for(document.training_options)
        added = 0
        for text, label in augment_document(document, tokenizer, self.shuffle):
            classifier.add_document(text, label)
            added += 1
        return added

    def train_into(self, classifier: BayesClassifier, documents: Iterable[TrainingDocument]) -> int:
        """Train an explicitly supplied classifier without touching the cache."""
        return sum(self.train_document(classifier, doc) for doc in documents)

    def train_batch(
        self,
        documents: Sequence[Union[TrainingDocument, Dict[str, Any]]],
        classifier_name: str,
        set_on_last: bool = False,
    ) -> int:
        """Train the cached classifier ``classifier_name`` on a batch of documents.

        The classifier is written back to the cache after the final document
        of a multi-document batch, or after every document when
        ``set_on_last`` is true. Errors abort the batch; documents already
        added stay in the classifier.

        Returns:
            Number of documents added to the classifier.
        """
        classifier = self._bind(classifier_name)
        doc_count = len(documents)
        total = 0

        try:
            for index, document in enumerate(documents):
                if not isinstance(document, TrainingDocument):
                    document = TrainingDocument.from_dict(document)
                if not document.source_values:
                    logger.error("No source values to train on for document %d", index)
                    continue

                total += self.train_document(classifier, document)

                is_last = doc_count == index + 1 and doc_count != 1
                if is_last or set_on_last:
                    logger.debug("Completed documents for classifier %s, updating cache", classifier_name)
                    self.cache.set(classifier_name, classifier)
        except Exception:
            logger.exception("Error training classifier %s", classifier_name)
            raise

        logger.info("Added %d examples to classifier %s from %d training documents", total, classifier_name, doc_count)
        return total
