"""
Pydantic models for BNP Paribas accounts, statements and portal configuration.
"""
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


ISO_DATE_PATTERN = r'^\d{4}-\d{2}-\d{2}$'
ACCOUNT_NUMBER_PATTERN = r'^\d{5}\s+\d{9}\s+\d{2}$'


class StatementRecord(BaseModel):
    """One line of account activity."""
    model_config = ConfigDict(frozen=True)

    date: str = Field(pattern=ISO_DATE_PATTERN)
    description: str
    amount: Decimal

    def as_string(self, separator: str = "\t") -> str:
        """Join date, description and amount with the given separator."""
        return separator.join([self.date, self.description, format(self.amount, 'f')])


class AccountRecord(BaseModel):
    """An account with its balance and the statements of the export period."""
    model_config = ConfigDict(frozen=True)

    name: str
    account_number: str = Field(pattern=ACCOUNT_NUMBER_PATTERN)
    statement_date: str = Field(pattern=ISO_DATE_PATTERN)
    balance: Decimal
    statements: Tuple[StatementRecord, ...] = ()

    @property
    def sort_code(self) -> None:
        """The export format does not carry a sort code."""
        return None

    @property
    def account_no(self) -> str:
        return self.account_number


class BalanceReport(BaseModel):
    """Accounts collected by one session, with any skipped-input diagnostics."""
    accounts: List[AccountRecord] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)


class LoginForm(BaseModel):
    """Identity and field names of the portal login form."""
    name: str
    username_field: str
    password_field: str
    extra_fields: Dict[str, str] = Field(default_factory=dict)


class ExportForm(BaseModel):
    """Position and required fields of the statement export form."""
    index: int = 0
    fields: Dict[str, str] = Field(default_factory=dict)

    @field_validator('index')
    @classmethod
    def validate_index(cls, v):
        """Form positions are zero-based."""
        if v < 0:
            raise ValueError(f"Form index cannot be negative: {v}")
        return v


class PortalConfig(BaseModel):
    """Everything needed to drive one online banking portal."""
    model_config = ConfigDict(frozen=True)

    portal_id: str
    login_url: str
    empty_response_retries: int = 13
    timeout: Optional[float] = 30
    user_agent: str = "bnpparibas/{version} ({platform})"
    login_form: LoginForm
    post_login_headers: Dict[str, str] = Field(default_factory=dict)
    export_path: str
    export_form: ExportForm
    export_link_suffix: str = ".exl"
    no_activity_marker: str = "<html>"

    @field_validator('empty_response_retries')
    @classmethod
    def validate_retries(cls, v):
        """At least one attempt is always made."""
        if v < 1:
            raise ValueError(f"empty_response_retries must be at least 1, got {v}")
        return v
