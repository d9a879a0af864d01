from shared.utils.formatting import format_brl, format_usd, mask_identifier
from shared.utils.http_security import SECURITY_HEADERS, apply_security_headers
from shared.utils.ids import format_transaction_number, new_uuid, parse_uuid
from shared.utils.time import days_back, ensure_aware, seconds_until, start_of_day, utc_now
from shared.utils.validation import blank_to_none

__all__ = [
    "SECURITY_HEADERS",
    "apply_security_headers",
    "blank_to_none",
    "days_back",
    "ensure_aware",
    "format_brl",
    "format_transaction_number",
    "format_usd",
    "mask_identifier",
    "new_uuid",
    "parse_uuid",
    "seconds_until",
    "start_of_day",
    "utc_now",
]
