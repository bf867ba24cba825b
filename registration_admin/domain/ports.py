"""Entity store port consumed by the coordinator"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from registration_admin.domain.models import Record


class EntityStore(Protocol):
    """
    Remote row store. Every call commits on its own; there is no way to group
    calls into one transaction.

    All methods raise ``StoreError`` when the store rejects the call or cannot
    be reached (timeouts included).
    """

    async def insert(self, table: str, record: Dict[str, Any]) -> Record:
        """Insert a row and return it as stored"""
        ...

    async def update(self, table: str, record_id: Any, patch: Dict[str, Any]) -> Optional[Record]:
        """Patch a row and return it, or None when no row has that id"""
        ...

    async def delete(self, table: str, record_id: Any) -> None:
        """Delete a row; deleting an absent row is not an error"""
        ...

    async def get(
        self,
        table: str,
        record_id: Any,
        select: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        """Fetch one row, optionally narrowed to ``select`` columns"""
        ...

    async def find(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        """Fetch rows whose columns equal every value in ``filters``"""
        ...
