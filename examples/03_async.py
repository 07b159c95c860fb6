"""
Example 03: Async Support

This example demonstrates running queries on a worker pool with AsyncQueryRunner.
Each call returns a concurrent.futures.Future; asyncio code can await it
through asyncio.wrap_future.
"""

import asyncio
from row_runner import AsyncQueryRunner, ConnectionConfig, RecordListHandler, ScalarHandler
from dataclasses import dataclass
import tempfile
from pathlib import Path


@dataclass
class User:
    id: int
    name: str
    email: str


async def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    config = ConnectionConfig(driver="sqlite", database=db_path, pool_size=2)

    with AsyncQueryRunner.from_config(config, max_workers=2) as runner:
        print("=== Async Query Execution ===\n")

        # Futures can be waited on directly...
        runner.update(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT NOT NULL)"
        ).result()

        # ...or awaited from asyncio code
        counts = await asyncio.wrap_future(
            runner.batch(
                "INSERT INTO users (name, email) VALUES (?, ?)",
                [
                    ["Alice", "alice@example.com"],
                    ["Bob", "bob@example.com"],
                    ["Charlie", "charlie@example.com"],
                ],
            )
        )
        print(f"batch result: {counts}\n")

        # Several calls in flight at once
        users, count = await asyncio.gather(
            asyncio.wrap_future(runner.query("SELECT * FROM users", RecordListHandler(User))),
            asyncio.wrap_future(runner.query("SELECT COUNT(*) FROM users", ScalarHandler())),
        )
        print(f"Fetched {len(users)} of {count} users:")
        for user in users:
            print(f"  - {user.name} ({user.email})")
        print()

        # Failures surface when the future is consumed
        try:
            await asyncio.wrap_future(runner.query("SELECT * FROM missing", ScalarHandler()))
        except Exception as e:
            print(f"Query failed: {type(e).__name__}: {e}")

    Path(db_path).unlink()


if __name__ == "__main__":
    asyncio.run(main())
