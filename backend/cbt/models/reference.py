"""
Reference vocabulary: subjects, classes, terms and academic sessions.

Dependent rows (questions, batches, codes, assignments) refer to these by
name rather than by foreign key, so renaming a subject does not cascade.
"""

from sqlalchemy import Column, String, DateTime, Boolean
from datetime import datetime

from cbt.core.database import Base
from cbt.core.types import GUID, generate_uuid


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class SchoolClass(Base):
    """A class/grade level such as JSS1 or SS3"""
    __tablename__ = "classes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(50), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Term(Base):
    __tablename__ = "terms"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(50), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AcademicSession(Base):
    """An academic year such as 2024/2025; at most one is current"""
    __tablename__ = "sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(20), unique=True, nullable=False)
    is_current = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
