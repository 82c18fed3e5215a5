"""
Durable record store.

One RecordStore is built at startup and shared by every request handler. Each
call opens its own session, so the object itself holds no per-request state.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from . import models
from .database import Base, make_engine, make_session_factory, ping
from .errors import PersistenceError

logger = logging.getLogger(__name__)


class RecordStore:

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> 'RecordStore':
        return cls(make_engine(database_url))

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def check(self) -> None:
        """Raise if the database cannot be reached."""
        ping(self.engine)

    def is_available(self) -> bool:
        try:
            self.check()
            return True
        except SQLAlchemyError as e:
            logger.warning("Store ping failed: %s", e)
            return False

    @contextmanager
    def _session(self, action: str):
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Store error while trying to %s: %s", action, e)
            raise PersistenceError(detail=f"{action}: {e}") from e
        finally:
            db.close()

    def _insert(self, action: str, row):
        with self._session(action) as db:
            db.add(row)
            db.flush()
            db.refresh(row)
            db.expunge(row)
        return row

    # ===== RECORDS =====

    def add_newsletter(self, email: str) -> models.NewsletterSubscription:
        row = self._insert('save newsletter', models.NewsletterSubscription(email=email))
        logger.info("Newsletter subscription %s stored", row.id)
        return row

    def add_volunteer(self, data: Dict[str, Any]) -> models.VolunteerApplication:
        row = self._insert('save volunteer', models.VolunteerApplication(data=data))
        logger.info("Volunteer application %s stored (%d fields)", row.id, len(data))
        return row

    def add_donation(self, name: str, email: str, amount: float, extra: Optional[Dict[str, Any]] = None) -> models.DonationRecord:
        row = self._insert('save donation', models.DonationRecord(
            name=name,
            email=email,
            amount=amount,
            extra=extra or None,
            status=models.RECORDED,
        ))
        logger.info("Donation %s recorded (amount=%.2f)", row.id, amount)
        return row

    def get_donation(self, donation_id: int) -> Optional[models.DonationRecord]:
        with self._session('load donation') as db:
            row = db.get(models.DonationRecord, donation_id)
            if row is not None:
                db.expunge(row)
        return row

    # ===== PAYMENT ORDERS =====

    def add_order(self, order_id: str, amount: int, currency: str, receipt: Optional[str] = None,
                  donation_id: Optional[int] = None) -> models.PaymentOrder:
        """Persist a gateway order and move the linked donation to order_created."""
        with self._session('save order') as db:
            order = models.PaymentOrder(
                order_id=order_id,
                amount=amount,
                currency=currency,
                receipt=receipt,
                donation_id=donation_id,
                status=models.ORDER_CREATED,
            )
            db.add(order)
            if donation_id is not None:
                donation = db.get(models.DonationRecord, donation_id)
                if donation is not None:
                    donation.order_id = order_id
                    donation.status = models.ORDER_CREATED
                    donation.updated_at = models.utcnow()
            db.flush()
            db.refresh(order)
            db.expunge(order)
        logger.info("Order %s stored (amount=%d %s, donation=%s)", order_id, amount, currency, donation_id)
        return order

    def get_order(self, order_id: str) -> Optional[models.PaymentOrder]:
        with self._session('load order') as db:
            row = db.query(models.PaymentOrder).filter(models.PaymentOrder.order_id == order_id).first()
            if row is not None:
                db.expunge(row)
        return row

    def mark_payment(self, order_id: str, payment_id: str, verified: bool) -> Optional[models.PaymentOrder]:
        """
        Record the outcome of a payment verification on the order and its donation.
        Returns None when the order was never created through this server.
        """
        status = models.VERIFIED if verified else models.VERIFICATION_FAILED
        now = models.utcnow()
        with self._session('update payment status') as db:
            order = db.query(models.PaymentOrder).filter(models.PaymentOrder.order_id == order_id).first()
            if order is None:
                return None
            # verified is terminal for the order and for its donation
            if order.status != models.VERIFIED:
                order.status = status
                order.payment_id = payment_id
                order.updated_at = now
                if order.donation_id is not None:
                    donation = db.get(models.DonationRecord, order.donation_id)
                    if donation is not None and donation.status != models.VERIFIED:
                        # a failure only counts against the donation's current order
                        if verified or donation.order_id == order.order_id:
                            donation.status = status
                            donation.order_id = order.order_id
                            donation.payment_id = payment_id
                            donation.updated_at = now
            db.flush()
            db.refresh(order)
            db.expunge(order)
        return order
