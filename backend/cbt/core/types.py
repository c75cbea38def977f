"""Column types that behave the same on SQLite (tests) and PostgreSQL"""
from sqlalchemy import TypeDecorator, String
import uuid


def generate_uuid() -> str:
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """UUIDs kept as 36-character strings; ``uuid.UUID`` values are accepted on write"""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)


class CodeString(TypeDecorator):
    """
    Test codes: trimmed and upper-cased on the way in, including in WHERE
    clauses, so lookups are case-insensitive without a functional index.
    """
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value).strip().upper()
