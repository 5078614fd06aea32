from sqlalchemy import Column, String, Text
import uuid

from app.db import Base


class Skill(Base):
    """Career-pathway skill catalog entry (managed elsewhere, read-only here)."""
    __tablename__ = "skills"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    description = Column(Text, nullable=False)
    theme_name = Column(String, nullable=True)
