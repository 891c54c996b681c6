"""Remote bundle registry access."""

from .client import BundleNotFound
from .client import RegistryClient
from .client import RegistryError
from .client import RegistryUnavailable

__all__ = ["RegistryClient", "RegistryError", "RegistryUnavailable", "BundleNotFound"]
