"""
Database module for the CBT Portal

Contains seed data and database utilities.
"""
from cbt.db.seed_data import seed_all, clear_all

__all__ = ["seed_all", "clear_all"]
