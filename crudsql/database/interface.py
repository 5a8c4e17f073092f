"""
Database interface
What a repository needs from a database driver
"""

from typing import Any, AsyncContextManager, List, Mapping, Optional, Protocol, runtime_checkable

from ..query import SqlQuery

Row = Mapping[str, Any]


@runtime_checkable
class DatabaseInterface(Protocol):
    """
    Asynchronous database collaborator

    Implementations compile fragments with their own placeholder style
    and return rows as column -> value mappings.
    """

    async def query(self, query: SqlQuery) -> List[Row]:
        """Run a statement and return its rows (empty for statements without results)"""
        ...

    async def insert_and_get(self, query: SqlQuery) -> List[Any]:
        """Run an INSERT and return the new primary keys or the inserted rows"""
        ...

    async def update_and_get(self, query: SqlQuery) -> Optional[List[Row]]:
        """
        Run an UPDATE and return the updated rows

        Returns None when the driver cannot tell which rows matched.
        """
        ...

    def transaction(self) -> AsyncContextManager["DatabaseInterface"]:
        """
        Open a scoped transaction

        Yields a handle bound to the transaction; commits on normal exit
        and rolls back when the block raises.
        """
        ...
