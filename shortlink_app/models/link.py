from sqlalchemy import Column, Integer, String, Text

from shortlink_app.database.connection import Base

LINK_ACTIVE = 1


class Link(Base):
    """
    Slug to target URL mapping plus its access policy.

    Rows are created once and never updated by the service. The UNIQUE
    constraint on slug is the only guard against concurrent creations.
    """
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # unique=True also creates the index
    slug = Column(String(64), unique=True, nullable=False)
    url = Column(String(2048), nullable=False, index=True)
    status = Column(Integer, nullable=False, default=LINK_ACTIVE)  # 1 = active, anything else = disabled
    expires_at = Column(String(40), nullable=True)  # ISO-8601, null = never expires
    password = Column(String(255), nullable=True)  # plaintext access password

    # Provenance, not used for authorization
    ip = Column(String(255), nullable=True)
    ua = Column(Text, nullable=True)
    create_time = Column(String(40), nullable=True)
