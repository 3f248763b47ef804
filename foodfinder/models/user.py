from sqlalchemy import Column, String, JSON
from foodfinder.core.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    uid = Column(String, primary_key=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
    favorites = Column(JSON, nullable=False, default=list)
