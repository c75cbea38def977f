from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from cbt.core.database import Base
from cbt.core.types import GUID, generate_uuid


class TeacherAssignment(Base):
    """Authorizes a teacher to author questions for one subject/class pair"""
    __tablename__ = "teacher_assignments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    teacher_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(100), nullable=False)
    class_name = Column("class", String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("User", lazy="selectin")
