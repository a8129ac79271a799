"""Core data models for the canonical ledger."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Callable, List, Optional, Sequence, TypeVar

from ..exceptions import EmptyStatementError


OFX_DATE_FORMAT = "%Y%m%d000000[-3:BRT]"
DEFAULT_CURRENCY = "BRL"
CENTS = Decimal("0.01")

T = TypeVar("T")


class TransactionKind(Enum):
    """OFX transaction type"""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


def format_ofx_date(value: datetime) -> str:
    """Render a timestamp as an OFX date string.

    Only the calendar date survives; the time of day is always written as
    midnight in Brasília time.
    """
    return value.strftime(OFX_DATE_FORMAT)


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly two fractional digits"""
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def amount_from_minor_units(minor_units: int, kind: TransactionKind) -> Decimal:
    """Convert integer cents to a signed amount: debits negative, credits positive"""
    amount = (Decimal(minor_units) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
    if kind is TransactionKind.DEBIT:
        return -amount
    return amount


@dataclass
class Transaction:
    """Provider-agnostic transaction.

    Attributes:
        id: Provider transaction identifier (OFX FITID)
        description: Merchant or operation description (OFX MEMO)
        kind: Credit or debit
        timestamp: Provider-local naive timestamp
        amount: Signed amount in BRL, two fractional digits
    """
    id: str
    description: str
    kind: TransactionKind
    timestamp: datetime
    amount: Decimal

    @property
    def posted(self) -> str:
        return format_ofx_date(self.timestamp)

    @property
    def formatted_amount(self) -> str:
        return format_amount(self.amount)


@dataclass
class Statement:
    """One fetched statement, ready to be serialized.

    ``period_start`` and ``period_end`` come from the first and last raw
    provider items in response order, not from a chronological scan.
    """
    account_label: str
    period_start: datetime
    period_end: datetime
    transactions: List[Transaction] = field(default_factory=list)
    currency: str = DEFAULT_CURRENCY

    @property
    def start(self) -> str:
        return format_ofx_date(self.period_start)

    @property
    def end(self) -> str:
        return format_ofx_date(self.period_end)

    @classmethod
    def from_items(
        cls,
        account_label: str,
        items: Sequence[T],
        timestamp_of: Callable[[T], datetime],
        is_settled: Callable[[T], bool],
        to_transaction: Callable[[T], Transaction],
    ) -> "Statement":
        """Build a statement from raw provider items.

        Raises:
            EmptyStatementError: If ``items`` is empty. A non-empty input whose
                items are all unsettled still yields a statement with no
                transactions.
        """
        if not items:
            raise EmptyStatementError("No statement to convert")

        return cls(
            account_label=account_label,
            period_start=timestamp_of(items[0]),
            period_end=timestamp_of(items[-1]),
            transactions=[to_transaction(item) for item in items if is_settled(item)],
        )


@dataclass
class FetchConfig:
    """Settings for fetching statements.

    Attributes:
        provider: Provider to fetch from - "caju" or "flash"
        caju_base_url: Base URL of the Caju API
        user_id: Caju user id
        employee_id: Employee id, shared by both providers
        flash_company_id: Flash company id
        flash_username: Flash login
        flash_auth_url: Cognito identity endpoint
        flash_web_auth_url: Flash web authentication base URL
        flash_bff_url: Flash statement (tRPC) base URL
        request_timeout: Transport timeout in seconds, None for no timeout
        log_directory: Directory for JSON error logs, None to disable
    """
    provider: str = "flash"
    caju_base_url: str = "https://apigw.caju.com.br"
    user_id: Optional[str] = None
    employee_id: Optional[str] = None
    flash_company_id: Optional[str] = None
    flash_username: Optional[str] = None
    flash_auth_url: str = "https://hros-auth.flashapp.services"
    flash_web_auth_url: str = "https://flashos-entrance.us.flashapp.services/v1/auth"
    flash_bff_url: str = "https://corporate-card-bff.us.flashapp.services/bff/trpc"
    request_timeout: Optional[float] = None
    log_directory: Optional[str] = None
