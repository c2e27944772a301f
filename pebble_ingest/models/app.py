from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime
from pebble_ingest.db.base import Base

class App(Base):
    __tablename__ = "apps"

    id = Column(String, primary_key=True, index=True)
    version = Column(String, nullable=False, default="")
    uri = Column(String, nullable=False, default="")
    avatar = Column(String, nullable=False, default="")
    content = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)
