"""Naive Bayes text classifier.

Documents are accumulated with :meth:`BayesClassifier.add_document` and the
scikit-learn model is fitted lazily on the first classification after a
change. Serialization keeps the raw documents rather than fitted arrays, so a
restored classifier refits to exactly the same model.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB

from .config import get_settings
from .exceptions import ClassifierNotTrainedError, CorruptClassifierError

logger = logging.getLogger(__name__)

SERIALIZATION_FORMAT = "lexibayes.bayes/1"
TOKEN_PATTERN = r"(?u)\b\w+\b"


@dataclass(frozen=True)
class Classification:
    """Score of a single label for a classified text."""
    label: str
    value: float


class BayesClassifier:
    """Multinomial Naive Bayes over bag-of-words counts."""

    def __init__(self, alpha: Optional[float] = None) -> None:
        self.alpha = float(alpha) if alpha is not None else get_settings().alpha
        self.documents: List[Tuple[str, str]] = []

        self._vectorizer: Optional[CountVectorizer] = None
        self._model: Optional[MultinomialNB] = None

    @property
    def labels(self) -> List[str]:
        """Trained labels in first-seen order."""
        seen: Dict[str, None] = {}
        for _, label in self.documents:
            seen.setdefault(label, None)
        return list(seen)

    @property
    def is_fitted(self) -> bool:
        return self._model is not None

    def add_document(self, text: Union[str, Sequence[str]], label: str) -> None:
        if not isinstance(text, str):
            text = " ".join(text)
        self.documents.append((text, str(label)))
        self._model = None

    def train(self) -> "BayesClassifier":
        """Fit the model on every document added so far."""
        if not self.documents:
            raise ClassifierNotTrainedError("Classifier has no documents to train on")

        texts = [text for text, _ in self.documents]
        targets = [label for _, label in self.documents]

        vectorizer: Optional[CountVectorizer] = CountVectorizer(token_pattern=TOKEN_PATTERN, lowercase=True)
        try:
            features = vectorizer.fit_transform(texts)
        except ValueError:
            # No document contains a term; the model falls back to class priors
            vectorizer = None
            features = sparse.csr_matrix((len(texts), 1), dtype=np.int64)

        model = MultinomialNB(alpha=self.alpha)
        model.fit(features, targets)

        self._vectorizer = vectorizer
        self._model = model
        logger.debug("Fitted Bayes model on %d documents, %d labels", len(texts), len(model.classes_))
        return self

    def _features(self, text: str):
        if self._vectorizer is None:
            return sparse.csr_matrix((1, 1), dtype=np.int64)
        return self._vectorizer.transform([text])

    def _ensure_fitted(self) -> MultinomialNB:
        if self._model is None:
            self.train()
        return self._model  # type: ignore[return-value]

    def get_classifications(self, text: str) -> List[Classification]:
        """Return every trained label with its posterior, best first."""
        model = self._ensure_fitted()
        probabilities = model.predict_proba(self._features(text))[0]
        scored = [Classification(str(label), float(p)) for label, p in zip(model.classes_, probabilities)]
        return sorted(scored, key=lambda c: c.value, reverse=True)

    def classify(self, text: str) -> str:
        return self.get_classifications(text)[0].label

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": SERIALIZATION_FORMAT,
            "alpha": self.alpha,
            "docs": [{"text": text, "label": label} for text, label in self.documents],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    @classmethod
    def restore(cls, payload: Union[str, bytes, Dict[str, Any]]) -> "BayesClassifier":
        """Rebuild a classifier from :meth:`to_json` output (string or parsed dict)."""
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
            if data.get("format") != SERIALIZATION_FORMAT:
                raise ValueError(f"unsupported format {data.get('format')!r}")
            classifier = cls(alpha=data["alpha"])
            for doc in data["docs"]:
                classifier.add_document(doc["text"], doc["label"])
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CorruptClassifierError(f"Cannot restore classifier: {e}") from e
        return classifier

    def __repr__(self) -> str:
        return f"BayesClassifier(documents={len(self.documents)}, labels={self.labels!r})"


def score_probability(score: float, base: float = math.e) -> float:
    """Map a raw score to (0, 1) with the inverse logit ``base**s / (1 + base**s)``.

    Naive Bayes scores tend to pile up near the boundaries; calibrating on a
    holdout set gives a better picture than this transform alone.
    """
    try:
        power = base ** score
    except OverflowError:
        return 1.0
    if math.isinf(power):
        return 1.0
    return power / (1.0 + power)
