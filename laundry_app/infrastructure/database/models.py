# laundry_app/infrastructure/database/models.py

import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from laundry_app.infrastructure.database.session import Base


class AuditLogRow(Base):
    """Append-only audit trail row. timestamp is set by the database."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))

    event_type = Column(String, nullable=False, index=True)
    event_action = Column(String, nullable=False)
    success = Column(Boolean, nullable=False)

    actor_id = Column(String, nullable=False, index=True)
    actor_email = Column(String, nullable=True)
    error_message = Column(String, nullable=True)
    details = Column(JSON, nullable=True)

    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
