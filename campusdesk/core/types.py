"""Custom SQLAlchemy types for cross-database compatibility"""
from sqlalchemy import TypeDecorator, String
import uuid


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """UUIDs stored as VARCHAR(36) on every backend, SQLite included"""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value
