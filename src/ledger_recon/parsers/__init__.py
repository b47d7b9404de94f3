"""Parsers for check register and bank feed CSV exports."""

from .bank_feed_parser import BankFeedParser
from .check_register_parser import CheckRegisterParser

__all__ = ["BankFeedParser", "CheckRegisterParser"]
