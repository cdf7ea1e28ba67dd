from __future__ import annotations

from typing import Any, Dict, List, Protocol, Tuple


class TokenizerProtocol(Protocol):
    def tokenize(self, text: str) -> List[str]:
        ...


class PersistenceBackend(Protocol):
    async def load(self, name: str) -> str:
        """Return the serialized classifier stored under ``name``."""
        ...

    async def save(self, name: str, payload: str) -> None:
        ...


class StopWordStore(Protocol):
    async def get_all(self) -> List[Dict[str, Any]]:
        """Return stop-word lists as ``[{"values": [...]}, ...]``."""
        ...

    async def update(self, list_id: str, values: List[str]) -> None:
        ...


class TaggerProtocol(Protocol):
    def tag(self, tokens: List[str]) -> List[Tuple[str, str]]:
        ...
