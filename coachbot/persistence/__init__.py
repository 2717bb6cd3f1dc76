"""Persistence layer: repository contracts, SQLite adapters and async stores."""
