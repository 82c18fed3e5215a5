from fastapi import Header, HTTPException, Request
from typing import Optional

from .config import Settings
from .razorpay_gateway import RazorpayGateway
from .store import RecordStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_gateway(request: Request) -> RazorpayGateway:
    return request.app.state.gateway


def require_admin_key(request: Request, x_api_key: Optional[str] = Header(default=None)):
    # Simple API key protection for admin reads; open when ADMIN_API_KEY is unset.
    admin_key = request.app.state.settings.admin_api_key
    if admin_key and x_api_key != admin_key:
        raise HTTPException(status_code=401, detail='Unauthorized')
