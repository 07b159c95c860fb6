"""
Example 01: Basic Query Execution

This example demonstrates queries, updates and batches with RowRunner's QueryRunner.
"""

from row_runner import (
    ArrayListHandler,
    ConnectionConfig,
    DictHandler,
    QueryRunner,
    ScalarHandler,
)
import tempfile
import sqlite3
from pathlib import Path


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    # Set up the database schema
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
    """)
    conn.commit()
    conn.close()

    # The runner owns a connection pool built from the config
    config = ConnectionConfig(driver="sqlite", database=db_path, pool_size=2)
    runner = QueryRunner.from_config(config)

    print("=== Basic Query Execution ===\n")

    # batch: one statement, many parameter rows
    counts = runner.batch(
        "INSERT INTO users (name, email, active) VALUES (?, ?, ?)",
        [
            ["Alice", "alice@example.com", 1],
            ["Bob", "bob@example.com", 1],
            ["Charlie", "charlie@example.com", 0],
        ],
    )
    print(f"batch result: {counts}\n")

    # query with DictHandler: first row as a case-insensitive dict
    user = runner.query("SELECT * FROM users WHERE id = ?", DictHandler(), 1)
    print(f"DictHandler result: {user}")
    print(f"User name: {user['NAME']}\n")

    # query with ArrayListHandler: every row as a list
    rows = runner.query("SELECT name, email FROM users WHERE active = ?", ArrayListHandler(), 1)
    print(f"ArrayListHandler result ({len(rows)} rows):")
    for name, email in rows:
        print(f"  - {name} ({email})")
    print()

    # update: affected row count
    updated = runner.update("UPDATE users SET active = 1 WHERE active = 0")
    print(f"update result: {updated} row(s) changed")

    # ScalarHandler: a single value
    count = runner.query("SELECT COUNT(*) FROM users WHERE active = 1", ScalarHandler())
    print(f"ScalarHandler result: {count} active users\n")

    # Clean up
    runner.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
