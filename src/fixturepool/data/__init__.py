"""Persistence layer: pool store file, store lock and result log."""
