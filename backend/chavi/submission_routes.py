"""
API endpoints for newsletter signups, volunteer applications and donation records
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from . import schemas
from .deps import get_store, require_admin_key
from .store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Submissions"])


@router.post('/newsletter')
def subscribe_newsletter(payload: schemas.NewsletterCreate, store: RecordStore = Depends(get_store)):
    store.add_newsletter(payload.email)
    return {"success": True, "message": "Newsletter subscribed"}


@router.post('/volunteers')
def create_volunteer(volunteer_data: Dict[str, Any] = Body(...), store: RecordStore = Depends(get_store)):
    """Volunteer form has no fixed schema; any JSON object is saved verbatim."""
    logger.info("Volunteer data received: %s", sorted(volunteer_data))
    store.add_volunteer(volunteer_data)
    return {"message": "Volunteer saved successfully"}


@router.post('/donations')
def create_donation(payload: schemas.DonationCreate, store: RecordStore = Depends(get_store)):
    d = store.add_donation(payload.name, payload.email, payload.amount, payload.extra_fields())
    return {"success": True, "id": d.id}


@router.get('/donations/{donation_id}', response_model=schemas.DonationStatus,
            dependencies=[Depends(require_admin_key)])
def get_donation(donation_id: int, store: RecordStore = Depends(get_store)):
    """Donation with its payment status (recorded, order_created, verified, verification_failed)"""
    d = store.get_donation(donation_id)
    if not d:
        raise HTTPException(status_code=404, detail='Not found')
    return d
