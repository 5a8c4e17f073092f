"""
Generic CRUD repository
Builds get/search/create/update/delete queries for one table and maps rows onto models
"""

import copy
from typing import Any, Generic, List, Mapping, Optional, Sequence, Type

from ...errors import NotFoundError, TooManyResultsError
from ...logger import get_logger
from ...query import Identifier, SqlQuery, join, raw, sql
from ..interface import DatabaseInterface, Row
from ..models import Hydrator, ModelT, hydrator_for, to_mapping

logger = get_logger(__name__)


class CrudRepository(Generic[ModelT]):
    """
    Repository for CRUD operations on a single table

    Every query is restricted by the optional ``scope`` fragment
    (soft-delete flags, tenant filters and the like), AND-combined with
    the per-call filter. The one exception is the read-back of a row
    that ``create`` or ``update`` has just written: it selects by primary
    key alone, so a write that moves the row out of the scope (a soft
    delete, say) still returns the row.

    Note:
        ``create`` and ``update`` re-read the row after writing when the
        driver does not hand it back. The row can be deleted by someone
        else in between; that surfaces as NotFoundError.

    Example:
        users = CrudRepository(
            database,
            table="users",
            model=User,
            scope=sql("{} IS NULL", Identifier("deleted_at")),
        )
        ada = await users.create({"name": "ada"})
        ada = await users.update(ada, {"name": "Ada"})
        admins = await users.search(where=sql("{} = {}", Identifier("role"), "admin"))
    """

    def __init__(
        self,
        database: DatabaseInterface,
        table: str,
        model: Type[ModelT],
        primary_key: str = "id",
        scope: Optional[SqlQuery] = None,
        hydrator: Optional[Hydrator] = None,
    ):
        """
        Initialize repository

        Args:
            database: Database the queries run on
            table: Table name
            model: Model type rows are mapped onto
            primary_key: Primary-key column name
            scope: Filter applied to every query
            hydrator: Row -> model function; derived from the model type by default
        """
        if scope is not None and not isinstance(scope, SqlQuery):
            raise TypeError(f"scope must be an SqlQuery, got {type(scope).__name__}")

        self.database = database
        self.table = table
        self.model = model
        self.primary_key = primary_key
        self.scope = scope
        self._hydrate = hydrator if hydrator is not None else hydrator_for(model)

    def bind(self, database: DatabaseInterface) -> "CrudRepository[ModelT]":
        """
        Copy of this repository running on another database handle

        Args:
            database: Usually a transaction handle

        Returns:
            CrudRepository: Same table, model and scope on the new handle
        """
        bound = copy.copy(self)
        bound.database = database
        return bound

    def hydrate(self, row: Row) -> ModelT:
        """Build a model instance from a result row"""
        return self._hydrate(row)

    async def get(
        self,
        key: Any,
        *,
        select: Optional[SqlQuery] = None,
        postfix: Optional[SqlQuery] = None,
    ) -> ModelT:
        """
        Fetch exactly one row by primary key

        Args:
            key: Primary-key value
            select: Custom select list (defaults to ``*``)
            postfix: Fragment appended after the WHERE clause

        Returns:
            Model instance

        Raises:
            NotFoundError: If no row matches
            TooManyResultsError: If more than one row matches
        """
        query = sql(
            "SELECT {} FROM {} WHERE {}",
            select or raw("*"),
            Identifier(self.table),
            self._key_filter(key),
        )
        if postfix:
            query = query + sql(" {}", postfix)

        rows = await self.database.query(query)
        return self._hydrate(self._one(rows, key))

    async def search(
        self,
        *,
        select: Optional[SqlQuery] = None,
        from_: Optional[SqlQuery] = None,
        where: Optional[SqlQuery] = None,
        group_by: Optional[SqlQuery] = None,
        order_by: Optional[SqlQuery] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        postfix: Optional[SqlQuery] = None,
    ) -> List[ModelT]:
        """
        Fetch all rows matching a filter

        Clauses that are not given are left out of the statement.

        Args:
            select: Custom select list (defaults to ``*``)
            from_: Custom FROM source, e.g. a join (defaults to the table)
            where: Filter, AND-combined with the scope
            group_by: GROUP BY expression list
            order_by: ORDER BY expression list
            limit: Maximum number of rows
            offset: Rows to skip (SQLite only accepts this together with limit)
            postfix: Fragment appended at the end

        Returns:
            List of model instances, possibly empty
        """
        filters = []
        if self.scope:
            filters.append(sql("({})", self.scope))
        if where:
            filters.append(sql("({})", where))

        clauses = [sql("SELECT {} FROM {}", select or raw("*"), from_ or Identifier(self.table))]
        if filters:
            clauses.append(sql("WHERE {}", join(filters, " AND ")))
        if group_by:
            clauses.append(sql("GROUP BY {}", group_by))
        if order_by:
            clauses.append(sql("ORDER BY {}", order_by))
        if limit is not None:
            clauses.append(sql("LIMIT {}", limit))
        if offset is not None:
            clauses.append(sql("OFFSET {}", offset))
        if postfix:
            clauses.append(postfix)

        rows = await self.database.query(join(clauses, " "))
        return [self._hydrate(row) for row in rows]

    async def exists(self, key: Any) -> bool:
        """
        Check if a row exists

        Args:
            key: Primary-key value

        Returns:
            bool: True if a row with that key is visible in the scope
        """
        rows = await self.database.query(sql(
            "SELECT 1 FROM {} WHERE {} LIMIT 1",
            Identifier(self.table),
            self._key_filter(key),
        ))
        return len(rows) > 0

    async def create(
        self,
        attributes: Mapping[str, Any],
        *,
        transaction: Optional[DatabaseInterface] = None,
    ) -> ModelT:
        """
        Insert a row and return it as a model

        Runs on ``transaction`` when given, otherwise in a transaction of
        its own.

        Args:
            attributes: Column -> value mapping; fragment values are inlined as SQL
            transaction: Open transaction handle to run on

        Returns:
            Model built from the stored row, or from ``attributes`` when the
            driver reports neither a key nor a row

        Raises:
            NotFoundError: If the inserted row cannot be read back
        """
        if transaction is not None:
            return await self._create(transaction, attributes)
        async with self.database.transaction() as tx:
            return await self._create(tx, attributes)

    async def update(
        self,
        model: ModelT,
        attributes: Mapping[str, Any],
        *,
        transaction: Optional[DatabaseInterface] = None,
    ) -> ModelT:
        """
        Update columns of the row behind a model

        Only the given attributes are written. The model passed in is left
        untouched; a new instance with the fresh column values is returned.
        With no attributes, nothing is written and the row is reloaded.

        Args:
            model: Model whose primary key selects the row
            attributes: Column -> value mapping to write
            transaction: Open transaction handle to run on

        Returns:
            New model instance

        Raises:
            NotFoundError: If no row matches
            TooManyResultsError: If more than one row was updated
        """
        if transaction is not None:
            return await self._update(transaction, model, attributes)
        async with self.database.transaction() as tx:
            return await self._update(tx, model, attributes)

    async def delete(self, model: ModelT) -> None:
        """
        Delete the row behind a model

        Deleting a row that does not exist is not an error.

        Args:
            model: Model whose primary key selects the row
        """
        key = self._key_of(model)
        await self.database.query(sql(
            "DELETE FROM {} WHERE {}",
            Identifier(self.table),
            self._key_filter(key),
        ))
        logger.info(f"Deleted from {self.table} where {self.primary_key} = {key!r}")

    async def _create(self, db: DatabaseInterface, attributes: Mapping[str, Any]) -> ModelT:
        attributes = dict(attributes)
        if attributes:
            query = sql(
                "INSERT INTO {} ({}) VALUES ({})",
                Identifier(self.table),
                join([Identifier(column) for column in attributes], ", "),
                join(list(attributes.values()), ", "),
            )
        else:
            query = sql("INSERT INTO {} DEFAULT VALUES", Identifier(self.table))

        returned = await db.insert_and_get(query)
        data = returned[0] if returned else None

        if data is None:
            logger.warning(
                f"Insert into {self.table} returned no key or row; using submitted attributes"
            )
            return self._hydrate(attributes)

        if isinstance(data, Mapping):
            logger.info(f"Created row in {self.table} with {self.primary_key} = {data.get(self.primary_key)!r}")
            return self._hydrate(data)

        # The driver's scalar is a rowid; a submitted key is the one to trust
        key = attributes.get(self.primary_key)
        if key is None or isinstance(key, SqlQuery):
            key = data

        rows = await db.query(self._select_by_key(key))
        row = self._one(rows, key, "after insert")
        logger.info(f"Created row in {self.table} with {self.primary_key} = {key!r}")
        return self._hydrate(row)

    async def _update(self, db: DatabaseInterface, model: ModelT,
                      attributes: Mapping[str, Any]) -> ModelT:
        key = self._key_of(model)
        if not attributes:
            return await self.bind(db).get(key)

        assignments = join(
            [sql("{} = {}", Identifier(column), value) for column, value in attributes.items()],
            ", ",
        )
        rows = await db.update_and_get(sql(
            "UPDATE {} SET {} WHERE {}",
            Identifier(self.table),
            assignments,
            self._key_filter(key),
        ))

        if rows is None:
            # Driver cannot report matched rows; confirm the row is still there
            rows = await db.query(self._select_by_key(key))
            row = self._one(rows, key, "after update")
        else:
            row = self._one(rows, key)

        merged = to_mapping(model)
        merged.update(row)
        logger.info(f"Updated {self.table} where {self.primary_key} = {key!r}: {', '.join(attributes)}")
        return self._hydrate(merged)

    def _key_filter(self, key: Any) -> SqlQuery:
        filters = [sql("{} = {}", Identifier(self.primary_key), key)]
        if self.scope:
            filters.append(sql("({})", self.scope))
        return join(filters, " AND ")

    def _select_by_key(self, key: Any) -> SqlQuery:
        # Reads back a row just written, so the scope does not apply
        return sql(
            "SELECT * FROM {} WHERE {} = {}",
            Identifier(self.table),
            Identifier(self.primary_key),
            key,
        )

    def _key_of(self, model: Any) -> Any:
        if isinstance(model, Mapping):
            return model[self.primary_key]
        return getattr(model, self.primary_key)

    def _one(self, rows: Sequence[Row], key: Any, context: str = "") -> Row:
        where = f"for {self.primary_key} = {key!r}"
        if context:
            where = f"{context} ({self.primary_key} = {key!r})"
        if len(rows) == 0:
            raise NotFoundError(
                f"Object not found in table {self.table} {where}",
                table=self.table, key=self.primary_key, value=key,
            )
        if len(rows) > 1:
            raise TooManyResultsError(
                f"Multiple objects found in table {self.table} {where}",
                table=self.table, key=self.primary_key, value=key,
            )
        return rows[0]
