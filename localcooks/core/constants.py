# localcooks/core/constants.py
"""Platform-wide constants shared across services and routes."""

BRAND_NAME = "Local Cooks"
PLATFORM_SLUG = "localcooks"

# User roles
ROLE_ADMIN = "admin"
ROLE_CHEF = "chef"
ROLE_DELIVERY_PARTNER = "delivery_partner"
ROLE_MANAGER = "manager"
USER_ROLES = (ROLE_ADMIN, ROLE_CHEF, ROLE_DELIVERY_PARTNER, ROLE_MANAGER)

# Locations
MAX_LOCATIONS_PER_MANAGER = 10
DEFAULT_LOCATION_TIMEZONE = "America/St_Johns"
DEFAULT_CANCELLATION_POLICY_HOURS = 24
DEFAULT_CANCELLATION_POLICY_MESSAGE = (
    "Bookings cannot be cancelled within {hours} hours of the scheduled time."
)
DEFAULT_DAILY_BOOKING_LIMIT = 2
DEFAULT_MINIMUM_BOOKING_WINDOW_HOURS = 1
CONTACT_METHODS = ("email", "phone", "both")

# Storage checkout
MAX_CHECKOUT_PHOTOS = 10
MIN_CLAIM_TITLE_LENGTH = 5
MIN_CLAIM_DESCRIPTION_LENGTH = 50

# Stripe Connect
STRIPE_CONNECT_COUNTRY = "CA"
