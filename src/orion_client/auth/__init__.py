"""Authentication modes and strategies for the Orion client."""
from .base import AuthStrategy
from .bearer import BearerAuth
from .modes import AuthMode

__all__ = ["AuthMode", "AuthStrategy", "BearerAuth"]
