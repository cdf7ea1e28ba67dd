from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .bayes import BayesClassifier

logger = logging.getLogger(__name__)


class ClassifierCache:
    """In-process mapping of classifier name to live instance.

    Entries live until removed or the process exits. Writes to an existing
    name replace the previous instance.
    """

    def __init__(self) -> None:
        self._classifiers: Dict[str, BayesClassifier] = {}

    def get(self, name: str) -> Optional[BayesClassifier]:
        return self._classifiers.get(name)

    def set(self, name: str, classifier: BayesClassifier) -> None:
        if name in self._classifiers and self._classifiers[name] is not classifier:
            logger.debug("Replacing cached classifier %s", name)
        self._classifiers[name] = classifier

    def remove(self, name: str) -> Optional[BayesClassifier]:
        return self._classifiers.pop(name, None)

    def clear(self) -> None:
        self._classifiers.clear()

    def names(self) -> List[str]:
        return list(self._classifiers)

    def __contains__(self, name: object) -> bool:
        return name in self._classifiers

    def __len__(self) -> int:
        return len(self._classifiers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._classifiers)
