"""
Example 02: Record Mapping

This example demonstrates mapping rows onto dataclasses and Pydantic models.
Columns match fields by name, ignoring case, spaces and underscores.
"""

from row_runner import (
    ArrayListHandler,
    ConnectionConfig,
    QueryRunner,
    RecordGroupHandler,
    RecordHandler,
    RecordListHandler,
    RowProcessor,
    trim_strings,
)
from row_runner.mapping import PropertyCoercion
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel


class Tier(Enum):
    FREE = "free"
    PRO = "pro"


@dataclass
class Customer:
    customer_id: int
    full_name: str
    tier: Tier = Tier.FREE


class Invoice(BaseModel):
    id: int
    customer_id: int
    total: Decimal
    memo: str = ""


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)

    with QueryRunner.from_config(config) as runner:
        runner.update(
            "CREATE TABLE customers (CustomerId INTEGER PRIMARY KEY, FULL_NAME TEXT, tier TEXT)"
        )
        runner.update(
            "CREATE TABLE invoices (id INTEGER PRIMARY KEY, customer_id INTEGER, "
            "total TEXT, memo TEXT)"
        )
        runner.batch(
            "INSERT INTO customers VALUES (?, ?, ?)",
            [[1, "  Ada Lovelace ", "pro"], [2, "Alan Turing", "free"]],
        )
        runner.batch(
            "INSERT INTO invoices VALUES (?, ?, ?, ?)",
            [[100, 1, "19.99", None], [101, 1, "5.00", "refund"], [102, 2, "42.00", None]],
        )

        print("=== Record Mapping ===\n")

        # Column CustomerId fills customer_id, FULL_NAME fills full_name
        customer = runner.query(
            "SELECT * FROM customers WHERE CustomerId = ?", RecordHandler(Customer), 1
        )
        print(f"RecordHandler result: {customer}\n")

        # Custom processor: strict coercion raises instead of passing values through
        processor = RowProcessor(coercion=PropertyCoercion(strict=True))
        customers = runner.query(
            "SELECT * FROM customers ORDER BY CustomerId",
            RecordListHandler(Customer, processor),
        )
        print("RecordListHandler result:")
        for c in customers:
            print(f"  - {c.full_name.strip()} ({c.tier.value})")
        print()

        # NULL memo leaves the model default in place
        invoices = runner.query(
            "SELECT * FROM invoices ORDER BY id",
            RecordGroupHandler(Invoice, key="customer_id"),
        )
        print("RecordGroupHandler result:")
        for customer_id, items in invoices.items():
            totals = ", ".join(f"{i.total} {i.memo!r}" for i in items)
            print(f"  customer {customer_id}: {totals}")
        print()

        # Post-processors apply to list and dict conversion
        trimmed = RowProcessor(post_processors=[trim_strings])
        names = runner.query(
            "SELECT FULL_NAME FROM customers ORDER BY CustomerId",
            ArrayListHandler(trimmed),
        )
        print(f"Names: {[row[0] for row in names]}")


if __name__ == "__main__":
    main()
