import os
from decimal import Decimal

CENT = Decimal("0.01")

# Balances and transfers at or below this magnitude count as settled.
SETTLED_TOLERANCE = Decimal("0.01")

# Allowed gap between a transaction amount and the sum of its split.
SPLIT_TOLERANCE = Decimal("0.02")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TRACE_BUFFER_SIZE = int(os.getenv("TRACE_BUFFER_SIZE", "1000"))

_origins_env = os.getenv("ALLOWED_ORIGINS", "")
ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()] if _origins_env else ["*"]
