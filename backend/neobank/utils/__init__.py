from neobank.utils.hashing import hash_bytes
from neobank.utils.validators import (
    validate_emirates_id, validate_trade_license, validate_email, parse_data_url,
)

__all__ = [
    "hash_bytes",
    "validate_emirates_id", "validate_trade_license", "validate_email", "parse_data_url",
]
