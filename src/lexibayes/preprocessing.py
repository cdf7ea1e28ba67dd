"""Text preprocessing ahead of classification.

Stop-word removal reads its word list from a pluggable store and degrades to
a no-op when the store is unavailable. POS tagging uses NLTK's averaged
perceptron tagger unless another tagger is injected.
"""

from __future__ import annotations

import csv
import logging
import re
from typing import Any, Dict, List, Optional, Union

import nltk

from .config import get_settings
from .entities import POSHandlerResult, TaggedToken, merge_entities
from .exceptions import TaggingDisabledError
from .interfaces import StopWordStore, TaggerProtocol

logger = logging.getLogger(__name__)

_SPECIAL_CHARACTERS = re.compile(r"[^\w\s]")


def clean_special_characters(text: str, tokenize: bool = False) -> Union[str, List[str]]:
    """Strip everything but word characters and whitespace, then trim.

    With ``tokenize`` the cleaned text is split on single spaces.
    """
    cleaned = _SPECIAL_CHARACTERS.sub("", text).strip()
    if tokenize:
        return cleaned.split(" ")
    return cleaned


class InMemoryStopWordStore:
    """Dict-backed stop-word store, mostly for tests and local runs."""

    def __init__(self, lists: Optional[Dict[str, List[str]]] = None) -> None:
        self._lists: Dict[str, List[str]] = {k: list(v) for k, v in (lists or {}).items()}

    async def get_all(self) -> List[Dict[str, Any]]:
        return [{"id": list_id, "values": list(values)} for list_id, values in self._lists.items()]

    async def update(self, list_id: str, values: List[str]) -> None:
        self._lists[list_id] = list(values)


class NLTKTagger:
    """Penn Treebank POS tagger backed by ``nltk.pos_tag``."""

    REQUIRED_DATA = [
        ("taggers/averaged_perceptron_tagger_eng", "averaged_perceptron_tagger_eng"),
    ]

    def __init__(self, lang: str = "eng", auto_download: Optional[bool] = None) -> None:
        self.lang = lang
        if auto_download is None:
            auto_download = get_settings().nltk_auto_download
        if auto_download:
            self._ensure_nltk_data()

    def _ensure_nltk_data(self) -> None:
        for data_path, package_name in self.REQUIRED_DATA:
            try:
                nltk.data.find(data_path)
            except LookupError:
                logger.info("Downloading NLTK resource %s", package_name)
                nltk.download(package_name, quiet=True)

    def tag(self, tokens: List[str]) -> List[tuple]:
        return nltk.pos_tag(tokens, lang=self.lang)


class TextPreprocessor:
    """Stop-word filtering, character cleaning and POS tagging."""

    def __init__(
        self,
        stop_word_store: Optional[StopWordStore] = None,
        pos_tag: bool = False,
        tagger: Optional[TaggerProtocol] = None,
    ) -> None:
        self.stop_word_store = stop_word_store
        self.pos_tag_enabled = pos_tag
        self.tagger: Optional[TaggerProtocol] = None
        if pos_tag:
            self.tagger = tagger if tagger is not None else NLTKTagger()

    async def _stop_words(self) -> List[str]:
        try:
            if self.stop_word_store is None:
                raise LookupError("no stop word store configured")
            stop_word_lists = await self.stop_word_store.get_all()
            if not stop_word_lists or not stop_word_lists[0].get("values"):
                raise LookupError("stop word object is empty")
            return list(stop_word_lists[0]["values"])
        except Exception:
            logger.exception("Error while getting stop words")
            return []

    async def remove_stop_words(self, text: str) -> str:
        """Drop every space-separated token that appears in the stop-word list."""
        logger.info("Request to remove stop words")
        stop_words = set(await self._stop_words())
        processed = " ".join(word for word in text.split(" ") if word not in stop_words)
        logger.info("Stop words removed: %r -> %r", text, processed)
        return processed

    async def update_stop_word_list(self, values: List[str], list_id: str) -> None:
        if self.stop_word_store is None:
            raise ValueError("No stop word store configured")
        await self.stop_word_store.update(list_id, values)

    def build_stop_word_list(self, path: str) -> List[Dict[str, str]]:
        """Read a stop-word CSV (with header row) into one dict per row."""
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return [dict(row) for row in csv.DictReader(f)]
        except OSError:
            logger.exception("Error reading stop word CSV %s", path)
            raise

    def clean_special_characters(self, text: str, tokenize: bool = False) -> Union[str, List[str]]:
        return clean_special_characters(text, tokenize)

    def tag(self, tokens: List[str]) -> Dict[str, List[TaggedToken]]:
        """POS-tag ``tokens`` as ``{"taggedWords": [...]}``."""
        if not self.pos_tag_enabled or self.tagger is None:
            raise TaggingDisabledError("Tagging not enabled")
        return {"taggedWords": [TaggedToken.coerce(pair) for pair in self.tagger.tag(tokens)]}

    def extract_entities(self, tokens: List[str], required_tags: Dict[str, str]) -> POSHandlerResult:
        """Tag ``tokens`` and merge the configured entity tags."""
        return merge_entities(self.tag(tokens), required_tags)
