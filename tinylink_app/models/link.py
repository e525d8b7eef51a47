from sqlalchemy import Column, Integer, String, DateTime
from tinylink_app.database.connection import Base


class LinkRow(Base):
    """
    Persisted link record.

    The unique constraint on ``code`` is what makes concurrent creators safe:
    the insert either wins or fails with an IntegrityError.
    """
    __tablename__ = "links"

    id = Column(String(32), primary_key=True)
    # unique=True creates the index used by every lookup
    code = Column(String(8), unique=True, nullable=False, index=True)
    url = Column(String, nullable=False)
    clicks = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    last_clicked = Column(DateTime(timezone=True), nullable=True)
