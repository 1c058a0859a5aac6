"""身份认证提供商"""

from .base import IdentityProviderBase
from .supabase import SupabaseIdentityProvider

__all__ = [
    "IdentityProviderBase",
    "SupabaseIdentityProvider",
]
