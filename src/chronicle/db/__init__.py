"""Persistence layer for chronicle."""
