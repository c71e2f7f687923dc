"""Application-wide constants.

Centralizes storage keys, currency and validation values shared by
the cart, checkout and search code.
"""
from decimal import Decimal

# ============== STORAGE KEYS ==============
CART_KEY = "cart"
TOKEN_KEY = "token"
USER_KEY = "user"
LAST_ORDER_KEY = "lastOrder"

# ============== CURRENCY ==============
STORE_CURRENCY = "USD"
DEFAULT_USD_INR_RATE = Decimal("83")  # 1 USD ~ 83 INR
RAZORPAY_SUBUNITS = 100  # paise per rupee
DEFAULT_CRYPTO_CURRENCY = "USDC"

# ============== CART ==============
MIN_QUANTITY = 1
MAX_DISCOUNT_PERCENT = 100

# ============== SEARCH ==============
SEARCH_DEBOUNCE_SECONDS = 0.5
SEARCH_MIN_QUERY_LENGTH = 2

# ============== ENDPOINTS ==============
DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_BASEPAY_API_URL = "https://api.basepay.example/v1"
RAZORPAY_API_URL = "https://api.razorpay.com/v1"
HTTP_TIMEOUT_SECONDS = 15
