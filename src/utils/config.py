# runtime settings, read once from the environment
import os

API_BASE_URL = os.getenv("STOREFRONT_API_URL", "https://backend.galerynavila.store")
REQUEST_TIMEOUT = float(os.getenv("STOREFRONT_TIMEOUT", "10"))

# payment widget page, opened with the snap token appended
PAYMENT_URL = os.getenv(
    "STOREFRONT_PAYMENT_URL", "https://app.sandbox.midtrans.com/snap/v2/vtweb/"
)

CACHE_PATH = os.getenv("STOREFRONT_CACHE_PATH", "data/cache.sqlite")
PRODUCTS_CACHE_MAX_AGE = 24 * 60 * 60  # seconds

# log file, stderr when empty
LOG_PATH = os.getenv("STOREFRONT_LOG_PATH", "data/storefront.log")

DEBUG = bool(os.getenv("DEBUG"))
