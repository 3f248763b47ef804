import uuid
from sqlalchemy import Column, String, Float, Integer, Boolean, Text, JSON
from sqlalchemy.orm import relationship
from foodfinder.core.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    category = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)

    rating = Column(Float, nullable=False, default=0.0)
    rating_total = Column(Float, nullable=False, default=0.0)
    reviews_count = Column(Integer, nullable=False, default=0)

    contact_number = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    owner_id = Column(String, nullable=True, index=True)
    price_range = Column(String, nullable=True)
    region = Column(String, nullable=True)
    is_halal = Column(Boolean, nullable=False, default=False)
    keywords = Column(JSON, nullable=False, default=list)
    image_url = Column(String, nullable=True)

    views = Column(Integer, nullable=False, default=0)
    whatsapp_clicks = Column(Integer, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)

    # Ordered list of menu item dicts, always rewritten as a whole.
    menu_items = Column(JSON, nullable=False, default=list)

    store_reviews = relationship("StoreReview", back_populates="store")
