from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class ShoppingSearchProvider(ABC):
    name: str = ""

    @abstractmethod
    async def search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        """Raw shopping results for ``query``, at most ``limit`` of them, in provider order.

        Raises UpstreamFetchError when the provider cannot be reached or
        reports an error.
        """
        ...
