"""Classifier lifecycle: cache lookups, backend loads and lazy creation."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from .backends import BackendKind, BlobBackend, FileSystemBackend
from .bayes import BayesClassifier, Classification
from .cache import ClassifierCache
from .config import get_settings
from .exceptions import (
    ClassifierNotFoundError,
    InvalidOptionsError,
    InvalidResponseTypeError,
    InvalidSourceError,
)
from .interfaces import PersistenceBackend

logger = logging.getLogger(__name__)

Source = Union[BackendKind, str]


class ResponseMode(str, Enum):
    """Shape of a classification result."""
    FULL_SCORES = "fullScores"
    CLASS = "class"

    @classmethod
    def parse(cls, value: Union["ResponseMode", str]) -> "ResponseMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidResponseTypeError(f"Invalid classify response type: {value!r}") from None


def default_backends() -> Dict[BackendKind, PersistenceBackend]:
    """Filesystem backend always; blob backend when a bucket is configured."""
    backends: Dict[BackendKind, PersistenceBackend] = {BackendKind.FS: FileSystemBackend()}
    if get_settings().blob_bucket:
        backends[BackendKind.BLOB] = BlobBackend()
    return backends


class ClassifierManager:
    """Resolves classifiers by name from a cache and persistence backends.

    Example:
        >>> manager = ClassifierManager(fs_backend=FileSystemBackend("./models"))
        >>> clf = await manager.get_or_create("intents", "fs")
        >>> await manager.set("intents", clf, upload=True, destination="fs")
    """

    def __init__(
        self,
        cache: Optional[ClassifierCache] = None,
        backends: Optional[Mapping[Source, PersistenceBackend]] = None,
        *,
        blob_backend: Optional[PersistenceBackend] = None,
        fs_backend: Optional[PersistenceBackend] = None,
    ) -> None:
        self.cache = cache if cache is not None else ClassifierCache()

        if backends is None and blob_backend is None and fs_backend is None:
            self.backends = default_backends()
        else:
            self.backends = {BackendKind.parse(kind): backend for kind, backend in (backends or {}).items()}
            if blob_backend is not None:
                self.backends[BackendKind.BLOB] = blob_backend
            if fs_backend is not None:
                self.backends[BackendKind.FS] = fs_backend

        self._creation_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def backend(self, source: Source) -> PersistenceBackend:
        kind = BackendKind.parse(source)
        try:
            return self.backends[kind]
        except KeyError:
            raise InvalidSourceError(f"No backend configured for source {kind.value!r}") from None

    async def resolve(self, name: str, source: Source, cache_on_hit: bool = False) -> BayesClassifier:
        """Return the cached classifier, or load it from ``source``.

        Raises:
            InvalidSourceError: ``source`` is not a known backend
            ClassifierNotFoundError: nothing stored under ``name``
            BackendIOError: the backend failed to read or the payload is corrupt
        """
        classifier = self.cache.get(name)
        if classifier is not None:
            logger.debug("Classifier %s served from cache", name)
            return classifier

        backend = self.backend(source)
        payload = await backend.load(name)
        classifier = BayesClassifier.restore(payload)
        logger.info("Loaded classifier %s from %s", name, BackendKind.parse(source).value)

        if cache_on_hit:
            self.cache.set(name, classifier)
        return classifier

    async def get_or_create(self, name: str, source: Source, upload: bool = False) -> BayesClassifier:
        """Resolve ``name``; create, cache and optionally upload an empty classifier if it does not exist.

        Only a genuine not-found triggers creation. Concurrent calls for the
        same name are serialized so a single instance is created.
        """
        lock = self._creation_locks.setdefault(name, asyncio.Lock())
        self._lock_users[name] = self._lock_users.get(name, 0) + 1
        try:
            async with lock:
                try:
                    return await self.resolve(name, source, cache_on_hit=True)
                except ClassifierNotFoundError:
                    logger.info("Classifier %s not found in %s, creating a new one", name, source)

                classifier = BayesClassifier()
                try:
                    await self.set(name, classifier, upload=upload, destination=source)
                except Exception:
                    logger.exception("Error setting new classifier %s", name)
                    raise
                return classifier
        finally:
            # Locks bind to one event loop; drop this one once nobody holds or waits on it
            self._lock_users[name] -= 1
            if not self._lock_users[name]:
                del self._lock_users[name]
                del self._creation_locks[name]

    async def set(
        self,
        name: str,
        classifier: Optional[BayesClassifier] = None,
        upload: bool = False,
        destination: Optional[Source] = None,
    ) -> BayesClassifier:
        """Cache ``classifier`` under ``name`` and optionally persist it to ``destination``.

        Without a classifier the blob backend is asked for one. The cache entry
        is replaced unconditionally (last write wins).
        """
        logger.debug("Setting classifier %s (upload=%s, destination=%s)", name, upload, destination)
        if classifier is None:
            try:
                classifier = await self.resolve(name, BackendKind.BLOB)
            except ClassifierNotFoundError as e:
                raise ClassifierNotFoundError(f"Cannot set classifier {name}: no instance supplied or stored") from e

        self.cache.set(name, classifier)

        if upload:
            if destination is None:
                raise InvalidOptionsError("Must specify destination when upload is true")
            await self.backend(destination).save(name, classifier.to_json())
        return classifier

    async def classify(
        self,
        text: str,
        classifier: Optional[BayesClassifier] = None,
        classifier_name: Optional[str] = None,
        response: Union[ResponseMode, str] = ResponseMode.CLASS,
    ) -> Union[str, List[Classification]]:
        """Classify ``text`` with an explicit classifier or one loaded by name from the blob backend."""
        try:
            if (classifier is None) == (classifier_name is None):
                raise InvalidOptionsError("Exactly one of classifier or classifier_name is required")
            mode = ResponseMode.parse(response)

            if classifier is None:
                classifier = await self.resolve_uncached(classifier_name, BackendKind.BLOB)

            if mode is ResponseMode.FULL_SCORES:
                return classifier.get_classifications(text)
            return classifier.classify(text)
        except Exception:
            logger.error(
                "Error classifying incoming value %r (classifier_name=%s, response=%s)",
                text, classifier_name, response,
            )
            raise

    async def resolve_uncached(self, name: str, source: Source) -> BayesClassifier:
        """Load ``name`` straight from the backend, bypassing the cache."""
        payload = await self.backend(source).load(name)
        return BayesClassifier.restore(payload)
