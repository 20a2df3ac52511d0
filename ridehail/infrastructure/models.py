"""
SQLAlchemy ORM models.

Tables
------
* ``vehicles`` -- the fleet; one row per vehicle, keyed by ``uuid``
* ``reviews``  -- pending and completed post-ride reviews

Column names are the ``Vehicle`` / ``Review`` field names so a dataclass
patch can be written straight back with ``UPDATE ... SET``.

Indexes
-------
* **B-Tree** on ``reviews.email`` and ``reviews.vehicle_id`` for the
  per-user and per-vehicle review reads.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .database import Base


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False)
    brand = Column(String(80), nullable=False)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    price_per_km = Column(Float, nullable=False)
    start_price = Column(Float, nullable=False)
    booked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ReviewModel(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), unique=True, nullable=False)
    email = Column(String(255), nullable=False)
    vehicle_id = Column(String(36), nullable=False)
    date_of_ride = Column(DateTime(timezone=True), nullable=False)
    price = Column(Float, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    rate = Column(Float, nullable=True)
    comment = Column(Text, nullable=True)

    __table_args__ = (
        # completed reviews carry a rate; pending ones carry no rating data
        CheckConstraint(
            "(completed AND rate IS NOT NULL) "
            "OR (NOT completed AND rate IS NULL AND comment IS NULL)",
            name="ck_reviews_rated_iff_completed",
        ),
        Index("idx_reviews_email", "email"),
        Index("idx_reviews_vehicle", "vehicle_id"),
    )
