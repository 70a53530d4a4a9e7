from sqlalchemy import Column, Integer, String, Text

from shortlink_app.database.connection import Base


class LogEntry(Base):
    """One successful redirect. Append-only, never read back by the service."""
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(Text, nullable=True)
    slug = Column(String(64), nullable=True)
    referer = Column(Text, nullable=True)
    ua = Column(Text, nullable=True)
    ip = Column(String(255), nullable=True)
