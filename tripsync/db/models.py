"""SQLAlchemy ORM models."""

import datetime as dt

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

# SQLite only autoincrements INTEGER primary keys
IdType = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Room(Base):
    """Room table - the chat room a trip is planned for."""

    __tablename__ = "room"

    room_id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    members: Mapped[list["RoomMember"]] = relationship("RoomMember", back_populates="room")
    preferences: Mapped[list["RoomPreference"]] = relationship(
        "RoomPreference", back_populates="room"
    )


class RoomMember(Base):
    """Room membership."""

    __tablename__ = "room_member"
    __table_args__ = (UniqueConstraint("room_id", "user_id", name="uq_room_member"),)

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("room.room_id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    room: Mapped["Room"] = relationship("Room", back_populates="members")


class RoomPreference(Base):
    """Chat-derived preference entry.

    kind is one of: place, must_visit, rule, chat.
    """

    __tablename__ = "room_preference"
    __table_args__ = (Index("idx_room_preference_room", "room_id"),)

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("room.room_id"), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    place_tag: Mapped[str | None] = mapped_column(String(32), nullable=True)

    room: Mapped["Room"] = relationship("Room", back_populates="preferences")


class Trip(Base):
    """Trip table - one row per generated version."""

    __tablename__ = "trip"
    __table_args__ = (Index("idx_trip_room_version", "room_id", "version_status"),)

    trip_id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("room.room_id"), nullable=False)
    destination: Mapped[str] = mapped_column(Text, nullable=False)
    version_status: Mapped[str] = mapped_column(String(8), nullable=False)
    trip_status: Mapped[str] = mapped_column(String(16), nullable=False)
    travel_mode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    budget: Mapped[int | None] = mapped_column(Integer, nullable=True)
    accommodation_cost_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    schedules: Mapped[list["Schedule"]] = relationship("Schedule", back_populates="trip")


class Schedule(Base):
    """Schedule table - one row per stop."""

    __tablename__ = "schedule"
    __table_args__ = (Index("idx_schedule_trip_day_order", "trip_id", "day_number", "visit_order"),)

    schedule_id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)
    trip_id: Mapped[int] = mapped_column(ForeignKey("trip.trip_id"), nullable=False)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    visit_order: Mapped[int] = mapped_column(Integer, nullable=False)
    place_name: Mapped[str] = mapped_column(Text, nullable=False)
    place_tag: Mapped[str] = mapped_column(String(32), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    is_visit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    arrival: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    departure: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    travel_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    estimated_cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cost_explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    trip: Mapped["Trip"] = relationship("Trip", back_populates="schedules")
