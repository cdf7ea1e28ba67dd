from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

logger = logging.getLogger(__name__)

PROPER_NOUN_TAG = "NNP"
MAX_CONTINUATIONS = 2


@dataclass(frozen=True)
class TaggedToken:
    token: str
    tag: str

    @classmethod
    def coerce(cls, value: Union["TaggedToken", Sequence[str], Mapping[str, str]]) -> "TaggedToken":
        """Accept a TaggedToken, a ``(token, tag)`` pair or a ``{"token", "tag"}`` mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(str(value["token"]), str(value["tag"]))
        token, tag = value
        return cls(str(token), str(tag))


@dataclass
class POSHandlerResult:
    """Tokens grouped by the configured tag fields, plus everything unmatched."""
    pos_tags: List[TaggedToken]
    stop_words: List[str] = field(default_factory=list)
    entities: Dict[str, List[str]] = field(default_factory=dict)

    def __getitem__(self, field_name: str) -> List[str]:
        return self.entities[field_name]

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "posTags": {"taggedWords": [{"token": t.token, "tag": t.tag} for t in self.pos_tags]},
            "stopWords": list(self.stop_words),
        }
        for name, values in self.entities.items():
            result[name] = list(values)
        return result


def _tagged_words(tagged: Any) -> List[TaggedToken]:
    if isinstance(tagged, Mapping):
        tagged = tagged["taggedWords"]
    return [TaggedToken.coerce(item) for item in tagged]


def merge_entities(tagged: Any, required_tags: Mapping[str, str]) -> POSHandlerResult:
    """Group tagged tokens into entity fields and stop words.

    A token whose tag is a key of ``required_tags`` starts an entity, which
    absorbs up to two immediately following ``NNP`` tokens. The joined entity
    goes to the field named ``required_tags[tag]``; every other token goes to
    ``stop_words``.

    Example:
        >>> merge_entities([("Marie", "NNP"), ("Curie", "NNP"), ("was", "VBD")], {"NNP": "people"})["people"]
        ['Marie Curie']
    """
    words = _tagged_words(tagged)
    result = POSHandlerResult(pos_tags=words)
    for field_name in required_tags.values():
        result.entities[field_name] = []

    j = 0
    while j < len(words):
        current = words[j]
        if current.tag in required_tags:
            parts = [current.token]
            continuations = 0
            while (
                continuations < MAX_CONTINUATIONS
                and j + 1 < len(words)
                and words[j + 1].tag == PROPER_NOUN_TAG
            ):
                j += 1
                parts.append(words[j].token)
                continuations += 1
            entity = " ".join(parts)
            logger.debug("Found %s entity: %s", current.tag, entity)
            result.entities[required_tags[current.tag]].append(entity)
        else:
            result.stop_words.append(current.token)
        j += 1

    return result
