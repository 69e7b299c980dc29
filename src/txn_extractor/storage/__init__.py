"""Persistence collaborators"""
from .base import Store
from .memory import InMemoryStore
from .postgres import PostgresStore

__all__ = ['Store', 'InMemoryStore', 'PostgresStore']
