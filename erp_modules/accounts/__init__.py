"""Accounts Module (``erp_modules.accounts``) -- plan-of-accounts seeding."""

from erp_modules.accounts.service import AccountsService

__all__ = ["AccountsService"]
