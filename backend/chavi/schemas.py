from pydantic import BaseModel, ConfigDict, EmailStr, Field, AliasChoices
from typing import Optional, Any, Dict
import datetime


class NewsletterCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class DonationCreate(BaseModel):
    # the donation form posts every field it has; keep the unknown ones
    model_config = ConfigDict(extra='allow', str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    amount: float = Field(gt=0, allow_inf_nan=False)

    def extra_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class DonationStatus(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    amount: float
    extra: Optional[Dict[str, Any]] = None
    status: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    created_at: datetime.datetime
    updated_at: Optional[datetime.datetime] = None


class OrderCreate(BaseModel):
    """Amount is in major units (rupees); the server converts to paise."""
    model_config = ConfigDict(populate_by_name=True)

    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    donation_id: Optional[int] = Field(default=None, alias='donationId')


class PaymentVerification(BaseModel):
    # accept both our names and the ones Razorpay Checkout hands to its handler
    model_config = ConfigDict(str_strip_whitespace=True)

    payment_id: str = Field(min_length=1, validation_alias=AliasChoices('paymentId', 'razorpay_payment_id'))
    order_id: str = Field(min_length=1, validation_alias=AliasChoices('orderId', 'razorpay_order_id'))
    signature: str = Field(min_length=1, validation_alias=AliasChoices('signature', 'razorpay_signature'))
