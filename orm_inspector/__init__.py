"""
ORM Inspector: reverse-engineer a database schema into record declarations
and ORM mapping definitions.
"""

__version__ = "0.1.0"
