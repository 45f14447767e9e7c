"""orgsync: Clerk identity sync service."""

__version__ = "0.1.0"
