"""
BNP Paribas balance checker

Logs into the BNPNet online banking portal, requests a tab separated export
of every account and parses it into account and statement records.
"""

__version__ = "0.3.0"

from .core.runner import check_balance, fetch_report, BalanceChecker
from .core.export import parse_account, parse_statement_line, ParsePolicy
from .core.normalize import normalize_date, normalize_amount, collapse_whitespace
from .core.portal import load_portal
from .core.errors import BankError, ConfigurationError, SessionError, ParseError
from .models.schema import AccountRecord, StatementRecord, BalanceReport, PortalConfig

__all__ = [
    "check_balance",
    "fetch_report",
    "BalanceChecker",
    "parse_account",
    "parse_statement_line",
    "ParsePolicy",
    "normalize_date",
    "normalize_amount",
    "collapse_whitespace",
    "load_portal",
    "BankError",
    "ConfigurationError",
    "SessionError",
    "ParseError",
    "AccountRecord",
    "StatementRecord",
    "BalanceReport",
    "PortalConfig",
]
