"""
Key-value storage backends consumed by the persistence gateway.

- sqlite_kv.py: durable SQLite-backed store (default)
- memory_kv.py: dict-backed store for ephemeral runs
"""
