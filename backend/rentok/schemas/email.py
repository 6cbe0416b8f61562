"""
RentOK Admin Backend — Transactional Email Schemas
===================================================

What:  Parameters of the two transactional emails and the uniform result
       the email service returns.
How:   Request bodies arrive in camelCase (the admin panel posts them
       straight from form state); fields are snake_case in Python and
       accept either spelling.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmailProduct(BaseModel):
    title: str = "Product"
    quantity: int = 1
    image: Optional[str] = None


class OrderStatusEmail(BaseModel):
    """
    Order status update email.

    customer_email, order_number and order_status are required by the
    endpoint; everything else only enriches the message body.
    """

    model_config = _CAMEL

    customer_name: str = "Customer"
    customer_email: Optional[str] = None
    order_number: Optional[str] = None
    order_status: Optional[str] = None
    previous_status: Optional[str] = None
    order_date: Optional[str] = None
    rental_start_date: Optional[str] = None
    rental_end_date: Optional[str] = None
    rental_days: Optional[int] = None
    total_amount: Optional[float] = None
    products: List[EmailProduct] = Field(default_factory=list)
    notes: Optional[str] = None
    tracking_url: Optional[str] = None


class VendorWelcomeEmail(BaseModel):
    """Welcome email sent to a vendor once their account is created."""

    model_config = _CAMEL

    vendor_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    business_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_ifsc_code: Optional[str] = None
    bank_account_holder_name: Optional[str] = None
    commission_rate: Optional[float] = None
    login_url: Optional[str] = None


class EmailResult(BaseModel):
    """Outcome of a send. Exactly one of `data` / `error` is set."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[Union[str, Dict[str, Any]]] = None

    @property
    def message_id(self) -> Optional[str]:
        return (self.data or {}).get("messageId")


class StatusEmailResponse(BaseModel):
    success: bool
    message: str
    messageId: Optional[str] = None


class WelcomeEmailResponse(BaseModel):
    message: str
    data: Optional[Dict[str, Any]] = None
