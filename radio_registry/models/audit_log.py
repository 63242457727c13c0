from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class AuditLog(Base):
    """Append-only record of a mutating or export action.

    ``radio_id`` and ``radio_serial`` are plain copies, not foreign keys, so
    history survives the deletion of the radio it describes.
    """

    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(Text, nullable=False)
    radio_id = Column(Text, nullable=True)
    radio_serial = Column(Text, nullable=True)
    details = Column(Text, nullable=True)
    operator_name = Column(Text, nullable=True)
    ip_address = Column(Text, nullable=True)
    timestamp = Column(Text, nullable=False, index=True)
