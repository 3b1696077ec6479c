"""SQLAlchemy models for GomeraWay.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from gomeraway.models.booking import Booking
from gomeraway.models.listing import AccommodationDetails, Listing, VehicleDetails
from gomeraway.models.subscription import Subscription
from gomeraway.models.user import User

__all__ = [
    "AccommodationDetails",
    "Booking",
    "Listing",
    "Subscription",
    "User",
    "VehicleDetails",
]
