"""portledger package root."""

from portledger.exceptions import LedgerError
from portledger.versions import SchemedVersion, Version, VersionScheme

__all__ = ["__version__", "LedgerError", "SchemedVersion", "Version", "VersionScheme"]

__version__ = "0.1.0"
