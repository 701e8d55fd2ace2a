from web3 import Web3

from tipjar.core.categories import ContentCategory


def is_valid_address(address: str) -> bool:
    if not isinstance(address, str) or not address.strip():
        return False
    return Web3.is_address(address.strip())


def normalize_address(address: str) -> str:
    return address.strip().lower()


def is_valid_category(category: str) -> bool:
    try:
        ContentCategory.parse(category)
    except ValueError:
        return False
    return True


def sanitize_string(value: str, max_length: int = 1000) -> str:
    return value.strip()[:max_length]
