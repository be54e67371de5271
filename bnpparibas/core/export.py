"""
Parsing of the tab separated export files downloaded from the portal.

An export file holds one account: a header line carrying the account name,
number, as-of date and balance, followed by one line per statement.
"""
import re
from enum import Enum
from typing import List, Optional
import logging

from .errors import ParseError
from .normalize import normalize_date, normalize_amount, collapse_whitespace
from ..models.schema import AccountRecord, StatementRecord

logger = logging.getLogger(__name__)


HEADER_RE = re.compile(
    r'^(.+?)\s+(\d{5}\s+\d{9}\s+\d{2})\t+(\d{2}/\d{2}/\d{2})\t+(\d+,\d+)'
)
FIELD_SEPARATOR = '\t'


class ParsePolicy(str, Enum):
    """What to do with input that cannot be parsed."""
    FAIL_FAST = "fail_fast"
    SKIP = "skip"


def parse_statement_line(line: str) -> StatementRecord:
    """
    Parse one statement line: date, description and amount separated by tabs.

    Fields past the third are ignored.

    Args:
        line: Raw export line

    Returns:
        StatementRecord with normalized values

    Raises:
        ParseError: if a field is missing or malformed
    """
    entry = line.split(FIELD_SEPARATOR)
    if len(entry) < 3:
        raise ParseError(
            f"Expected at least 3 tab separated fields, got {len(entry)}",
            field="fields", line=line
        )

    try:
        date = normalize_date(entry[0])
        amount = normalize_amount(entry[2])
    except ParseError as e:
        raise ParseError(f"Malformed statement {e.field}", field=e.field, line=line) from e

    return StatementRecord(
        date=date,
        description=collapse_whitespace(entry[1]),
        amount=amount
    )


def split_lines(text: str) -> List[str]:
    """Split an export body into lines, dropping terminators and trailing blanks."""
    lines = [line.rstrip('\r\n') for line in text.split('\n')]
    while lines and not lines[-1]:
        lines.pop()
    return lines


def parse_account(text: str, policy: ParsePolicy = ParsePolicy.FAIL_FAST,
                  diagnostics: Optional[List[ParseError]] = None) -> AccountRecord:
    """
    Parse the export body for one account.

    Args:
        text: Downloaded export file content
        policy: FAIL_FAST aborts on the first bad statement line; SKIP drops it
        diagnostics: Receives the errors of skipped lines in SKIP mode

    Returns:
        AccountRecord with its statements in export order

    Raises:
        ParseError: if the header is malformed, or a statement line is
            malformed and policy is FAIL_FAST
    """
    lines = split_lines(text or '')
    if not lines:
        raise ParseError("Malformed account header", field="header", line='')

    header = lines[0]
    match = HEADER_RE.match(header)
    if not match:
        raise ParseError("Malformed account header", field="header", line=header)

    name, account_number, date, balance = match.groups()

    statements = []
    for line in lines[1:]:
        try:
            statements.append(parse_statement_line(line))
        except ParseError as e:
            if policy != ParsePolicy.SKIP:
                raise
            logger.warning(f"Skipping statement line for {account_number}: {e}")
            if diagnostics is not None:
                diagnostics.append(e)

    account = AccountRecord(
        name=name,
        account_number=account_number,
        statement_date=normalize_date(date),
        balance=normalize_amount(balance),
        statements=statements
    )
    logger.debug(f"Parsed account {account.account_number}: {len(statements)} statements")

    return account
