"""
SQLAlchemy ORM model for marketplace items.
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, Boolean, Index
from sqlalchemy.sql import func

from app.database import Base


class ItemModel(Base):
    """
    A marketplace listing.

    Status lifecycle: draft -> active -> reserved -> sold, or deleted at any point.
    Only active items appear in search and nearby results.
    """
    __tablename__ = "items"

    id = Column(String(50), primary_key=True)
    seller_id = Column(String(50), nullable=False)
    category_id = Column(Integer, nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    condition = Column(String(20), nullable=False, default="good")  # new, like_new, good, fair, poor
    price_cents = Column(Integer, nullable=False)
    is_negotiable = Column(Boolean, default=True)
    status = Column(String(20), nullable=False, default="active")

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_items_status_created', 'status', 'created_at'),
        Index('idx_items_category', 'category_id'),
        Index('idx_items_price', 'price_cents'),
        Index('idx_items_seller', 'seller_id'),
    )

    def to_dict(self) -> dict:
        """Convert to the candidate shape used by search and ranking."""
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "category_id": self.category_id,
            "title": self.title,
            "description": self.description or "",
            "condition": self.condition,
            "price_cents": self.price_cents,
            "is_negotiable": bool(self.is_negotiable),
            "status": self.status,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Item {self.id}: {self.title} - {self.price_cents}c>"
