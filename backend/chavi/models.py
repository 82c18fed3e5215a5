from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, ForeignKey
from .database import Base
import datetime

# Payment states of a donation / order
RECORDED = 'recorded'
ORDER_CREATED = 'order_created'
VERIFIED = 'verified'
VERIFICATION_FAILED = 'verification_failed'


def utcnow():
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class NewsletterSubscription(Base):
    __tablename__ = 'newsletter'
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False, index=True)  # duplicates allowed
    created_at = Column(DateTime, default=utcnow)


class VolunteerApplication(Base):
    """Free-form volunteer form, stored exactly as submitted"""
    __tablename__ = 'volunteers'
    id = Column(Integer, primary_key=True, index=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class DonationRecord(Base):
    __tablename__ = 'donations'
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    amount = Column(Float, nullable=False)  # major units, as typed in the form
    extra = Column(JSON, nullable=True)  # any other form fields (phone, pan, message, ...)
    status = Column(String(30), default=RECORDED, nullable=False)
    order_id = Column(String(64), nullable=True, index=True)
    payment_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)


class PaymentOrder(Base):
    __tablename__ = 'payment_orders'
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(64), nullable=False, unique=True, index=True)  # gateway order id
    amount = Column(Integer, nullable=False)  # minor units (paise)
    currency = Column(String(10), nullable=False)
    receipt = Column(String(64), nullable=True)
    donation_id = Column(Integer, ForeignKey('donations.id'), nullable=True)
    status = Column(String(30), default=ORDER_CREATED, nullable=False)
    payment_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, nullable=True)
