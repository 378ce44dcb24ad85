"""Order status enum for order lifecycle management.

Order status changes are driven by the storefront staff; any status may be
set from any other status, so no transition table is kept here.
"""

from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle status.

    New orders start as PENDING unless the caller supplies a status.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
