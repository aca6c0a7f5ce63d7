"""slowapi limiter shared by the routers.

Every route gets the default per-IP budget; routes that build files or
parse uploads are decorated with the tighter limits below.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from workforce.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
)

# CSV / PDF downloads
EXPORT_LIMIT = "20/minute"
# Spreadsheet uploads
IMPORT_LIMIT = "5/minute"
