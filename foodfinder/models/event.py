from sqlalchemy import Column, Integer, String, DateTime, func
from foodfinder.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False)
    store_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
