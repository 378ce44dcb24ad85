"""Customer registry model."""

from typing import Optional

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import BaseModel


class Customer(BaseModel):
    """
    Customer contact record.

    Orders reference customers optionally; walk-in point-of-sale orders
    have no customer.
    """

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(Text, nullable=False, comment="Customer name")
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = ({"comment": "Customer registry"},)
