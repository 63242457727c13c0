from __future__ import annotations

from sqlalchemy import Column, Text

from ..db.session import Base


class Radio(Base):
    """One tracked radio unit and its assignment metadata."""

    __tablename__ = "radios"

    id = Column(Text, primary_key=True)
    serial_number = Column(Text, nullable=False, unique=True, index=True)
    radio_id = Column(Text, nullable=True)
    model = Column(Text, nullable=False)
    version = Column(Text, nullable=True)
    user_name = Column(Text, nullable=True)
    department = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    shift = Column(Text, nullable=True)
    status = Column(Text, nullable=True, default="active")
    notes = Column(Text, nullable=True)
    # Name of whoever last wrote the row; attribution only.
    operator_name = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False, index=True)
    updated_at = Column(Text, nullable=False)
    created_by_ip = Column(Text, nullable=True)
