"""
Identity resolution for check-ins: phone normalization, the identity cache,
the directory lookup client and the resolver that ties them together.
"""

from .cache import IdentityCache
from .lookup_client import DirectoryLookupClient, DirectoryLookupError
from .normalizer import format_fallback_name, normalize_phone
from .resolver import DirectoryResolver

__all__ = [
    "DirectoryLookupClient",
    "DirectoryLookupError",
    "DirectoryResolver",
    "IdentityCache",
    "format_fallback_name",
    "normalize_phone",
]
