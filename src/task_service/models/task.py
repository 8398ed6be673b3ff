from sqlalchemy import Boolean, Column, Index, Integer, String, Text

from task_service.db import Base, UTCDateTime, utcnow

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
# Upper bound of the INTEGER primary key
MAX_TASK_ID = 2**31 - 1


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Always taken from the verified principal, never from request input
    owner_id = Column(String(255), nullable=False)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_tasks_owner_id_created_at", "owner_id", "created_at"),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, owner_id='{self.owner_id}', completed={self.completed})>"
