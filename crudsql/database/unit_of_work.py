"""
Unit of Work pattern implementation
Provides transaction management across multiple repositories
"""

from typing import Any, AsyncContextManager, Optional, TypeVar

from ..logger import get_logger
from .interface import DatabaseInterface

logger = get_logger(__name__)

RepositoryT = TypeVar("RepositoryT")


class UnitOfWork:
    """
    Scoped transaction shared by several repositories

    Opens a transaction on entry, commits on normal exit and rolls back
    when the block raises. Repositories bound through the unit of work
    run every statement on the same transaction handle.

    Example:
        async with UnitOfWork(database) as uow:
            users = uow.bind(user_repository)
            posts = uow.bind(post_repository)
            author = await users.create({"name": "ada"})
            await posts.create({"author_id": author.id, "title": "Notes"})
            # Both committed together or both rolled back on error
    """

    def __init__(self, database: DatabaseInterface):
        """
        Initialize Unit of Work

        Args:
            database: Database to open the transaction on
        """
        self._root = database
        self._scope: Optional[AsyncContextManager[DatabaseInterface]] = None
        self.database: Optional[DatabaseInterface] = None

    async def __aenter__(self) -> "UnitOfWork":
        if self._scope is not None:
            raise RuntimeError("UnitOfWork is already active")
        self._scope = self._root.transaction()
        self.database = await self._scope.__aenter__()
        logger.debug("Unit of work started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> Any:
        scope, self._scope = self._scope, None
        try:
            return await scope.__aexit__(exc_type, exc, tb)
        finally:
            self.database = None
            if exc_type is None:
                logger.debug("Unit of work committed")
            else:
                logger.debug(f"Unit of work rolled back after {exc_type.__name__}")

    def bind(self, repository: RepositoryT) -> RepositoryT:
        """
        Bind a repository to this unit of work's transaction

        Args:
            repository: Repository with a ``bind(database)`` method

        Returns:
            A copy of the repository running on the transaction handle

        Raises:
            RuntimeError: If the unit of work is not active
        """
        if self.database is None:
            raise RuntimeError("UnitOfWork is not active; use 'async with UnitOfWork(...)'")
        return repository.bind(self.database)
