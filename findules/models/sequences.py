from sqlalchemy import Column, Integer, String
from findules.database import Base


class DocumentSequence(Base):
    """Last number handed out for a family of document codes (IMP, REC, FC)."""

    __tablename__ = "document_sequences"

    name = Column(String, primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
