"""Utility functions for caixa."""

from caixa.utils.date_parser import parse_date
from caixa.utils.amount_parser import parse_amount
from caixa.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
