"""
Database Usage Examples
Demonstrates how to use query fragments and the CRUD repository

Run this file to see the database in action:
    python examples/database_usage.py
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from crudsql import (
    CrudRepository,
    DatabaseConnection,
    Identifier,
    NotFoundError,
    SqliteDatabase,
    UnitOfWork,
    configure_logging,
    placeholder_for,
    raw,
    sql,
)


@dataclass
class Task:
    id: int
    title: str
    owner: str
    done: int = 0
    archived_at: Optional[str] = None


def initialize_database(connection: DatabaseConnection):
    """Create the example table"""
    print("Initializing database...")
    with connection.transaction() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tasks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                owner TEXT NOT NULL,
                done INTEGER NOT NULL DEFAULT 0,
                archived_at TEXT
            )
        """)
    print("✓ Database initialized\n")


def example_fragments():
    """Example: Building and compiling fragments"""
    print("=" * 60)
    print("EXAMPLE 1: Query Fragments")
    print("=" * 60)

    owner_filter = sql("{} = {}", Identifier("owner"), "ada")
    query = sql(
        "SELECT * FROM {} WHERE {} ORDER BY {}",
        Identifier("tasks"), owner_filter, Identifier("id"),
    )

    for style in ("qmark", "dollar", "named"):
        compiled = query.compile(placeholder_for(style))
        print(f"✓ {style:7} {compiled.sql}  {compiled.params}")
    print()


async def example_basic_operations(tasks: CrudRepository) -> Task:
    """Example: Basic CRUD operations"""
    print("=" * 60)
    print("EXAMPLE 2: Basic CRUD Operations")
    print("=" * 60)

    task = await tasks.create({"title": "Write notes", "owner": "ada"})
    print(f"✓ Created task: {task}")

    found = await tasks.get(task.id)
    print(f"✓ Found task by id: {found.title}")

    updated = await tasks.update(found, {"done": 1})
    print(f"✓ Updated task, done = {updated.done}")

    open_tasks = await tasks.search(where=sql("{} = {}", Identifier("done"), 0))
    print(f"✓ Open tasks: {len(open_tasks)}\n")

    return updated


async def example_transaction_management(database: SqliteDatabase, tasks: CrudRepository):
    """Example: Using a unit of work"""
    print("=" * 60)
    print("EXAMPLE 3: Transaction Management")
    print("=" * 60)

    async with UnitOfWork(database) as uow:
        bound = uow.bind(tasks)
        await bound.create({"title": "Review notes", "owner": "eve"})
        await bound.create({"title": "Publish notes", "owner": "eve"})
    print("✓ Created two tasks atomically")

    try:
        async with UnitOfWork(database) as uow:
            bound = uow.bind(tasks)
            await bound.create({"title": "Never stored", "owner": "eve"})
            await bound.get(9999)
    except NotFoundError as e:
        print(f"✓ Rolled back after: {e}")

    eve_tasks = await tasks.search(where=sql("{} = {}", Identifier("owner"), "eve"))
    print(f"✓ Tasks for eve: {len(eve_tasks)}\n")


async def example_scopes(database: SqliteDatabase, task: Task):
    """Example: Scoped repositories (soft delete)"""
    print("=" * 60)
    print("EXAMPLE 4: Scopes")
    print("=" * 60)

    everything = CrudRepository(database, table="tasks", model=Task)
    active = CrudRepository(
        database,
        table="tasks",
        model=Task,
        scope=sql("{} IS NULL", Identifier("archived_at")),
    )

    archived = await active.update(task, {"archived_at": raw("CURRENT_TIMESTAMP")})
    print(f"✓ Archived task {archived.id} at {archived.archived_at}")
    print(f"✓ Visible in scope: {await active.exists(task.id)}")
    print(f"✓ Total rows: {len(await everything.search())}\n")


async def main():
    configure_logging("INFO")
    connection = DatabaseConnection(":memory:")
    initialize_database(connection)

    database = SqliteDatabase(connection)
    tasks = CrudRepository(database, table="tasks", model=Task)

    example_fragments()
    task = await example_basic_operations(tasks)
    await example_transaction_management(database, tasks)
    await example_scopes(database, task)

    connection.close()
    print("All examples completed")


if __name__ == "__main__":
    asyncio.run(main())
