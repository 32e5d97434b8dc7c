from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    text,
    true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Businesses(Base):
    __tablename__ = 'businesses'

    id = Column(Integer, primary_key=True)
    slug = Column(String(63), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    vertical = Column(Text, nullable=False)
    description = Column(Text)
    theme_color = Column(Text, nullable=False, server_default=text("'blue'"), default='blue')
    slot_duration_min = Column(Integer, nullable=False, server_default=text('30'), default=30)
    max_bookings = Column(Integer, nullable=False, server_default=text('1'), default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime)

    availability = relationship('BusinessAvailability', back_populates='business')
    services = relationship('Services', back_populates='business')
    slots = relationship('Slots', back_populates='business')
    customers = relationship('Customers', back_populates='business')
    bookings = relationship('Bookings', back_populates='business')
    recurring_schedules = relationship('RecurringSchedules', back_populates='business')


class BusinessAvailability(Base):
    __tablename__ = 'business_availability'
    __table_args__ = (
        UniqueConstraint('business_id', 'day_of_week'),
        CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_availability_day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Monday, 6 = Sunday
    start_time = Column(String(5))  # "HH:MM"
    end_time = Column(String(5))
    is_closed = Column(Boolean, nullable=False, server_default=false(), default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    business = relationship('Businesses', back_populates='availability')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration_min > 0', name='ck_services_duration_positive'),
        CheckConstraint('total_price >= 0', name='ck_services_price_non_negative'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    duration_min = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)
    deposit_amount = Column(Float, nullable=False, server_default=text('0'), default=0.0)
    max_capacity = Column(Integer)  # overrides businesses.max_bookings for its slots
    is_active = Column(Boolean, nullable=False, server_default=true(), default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime)

    business = relationship('Businesses', back_populates='services')
    slots = relationship('Slots', back_populates='service')
    bookings = relationship('Bookings', back_populates='service')


class Slots(Base):
    __tablename__ = 'slots'
    __table_args__ = (
        CheckConstraint('end_time > start_time', name='ck_slots_time_order'),
        CheckConstraint('capacity >= 1', name='ck_slots_capacity_positive'),
        CheckConstraint(
            'booked_count >= 0 AND booked_count <= capacity',
            name='ck_slots_occupancy_range',
        ),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    service_id = Column(ForeignKey('services.id'), index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    capacity = Column(Integer, nullable=False, server_default=text('1'), default=1)
    booked_count = Column(Integer, nullable=False, server_default=text('0'), default=0)
    is_booked = Column(Boolean, nullable=False, server_default=false(), default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime)

    business = relationship('Businesses', back_populates='slots')
    service = relationship('Services', back_populates='slots')
    bookings = relationship('Bookings', back_populates='slot')


class Customers(Base):
    __tablename__ = 'customers'
    __table_args__ = (
        UniqueConstraint('business_id', 'email', name='uq_customers_business_email'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    business = relationship('Businesses', back_populates='customers')
    bookings = relationship('Bookings', back_populates='customer')


class Bookings(Base):
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id'), nullable=False, index=True)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    slot_id = Column(ForeignKey('slots.id'), nullable=False, index=True)
    customer_id = Column(ForeignKey('customers.id'), index=True)

    # snapshot at booking time, later edits to the service do not apply
    customer_name = Column(Text, nullable=False)
    customer_email = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    service_name = Column(Text, nullable=False)
    slot_time = Column(DateTime, nullable=False)
    deposit_paid = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    status = Column(String(20), nullable=False, server_default=text("'PENDING'"), default='PENDING')
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    cancelled_at = Column(DateTime)
    cancel_reason = Column(Text)

    business = relationship('Businesses', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    slot = relationship('Slots', back_populates='bookings')
    customer = relationship('Customers', back_populates='bookings')
    history = relationship(
        'BookingHistory',
        back_populates='booking',
        order_by='BookingHistory.id',
    )


class BookingHistory(Base):
    __tablename__ = 'booking_history'

    id = Column(Integer, primary_key=True)
    booking_id = Column(ForeignKey('bookings.id'), nullable=False, index=True)
    action = Column(String(32), nullable=False)
    previous_status = Column(String(20))
    new_status = Column(String(20), nullable=False)
    performed_by = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    booking = relationship('Bookings', back_populates='history')


class RecurringSchedules(Base):
    __tablename__ = 'recurring_schedules'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    days_of_week = Column(JSON, nullable=False)  # [0..6], 0 = Monday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    exclude_dates = Column(JSON, nullable=False, default=list)  # ["YYYY-MM-DD", ...]
    is_active = Column(Boolean, nullable=False, server_default=true(), default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    business = relationship('Businesses', back_populates='recurring_schedules')
