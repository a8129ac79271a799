"""Caju statement client.

Caju authenticates with a bearer/refresh token pair captured from the mobile
app and serves the statement through cursor pagination, newest first.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic.alias_generators import to_camel

from ..models.core import Statement, Transaction, TransactionKind, amount_from_minor_units
from ..utils.dates import month_bounds
from ..utils.http import build_session, parse_body, reveal, send


logger = logging.getLogger(__name__)

ACCOUNT_LABEL = "Caju"
MONTH_PAGE_SIZE = 20
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
DEPOSIT_DESCRIPTION = "Depósito em conta"


class CajuModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginResponse(CajuModel):
    bearer_token: SecretStr


class CajuItemStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    REFUNDED = "REFUNDED"
    PENDING = "PENDING"


class CajuItemData(CajuModel):
    merchant_name: Optional[str] = None
    operation_type: Optional[str] = None


class CajuStatementItem(CajuModel):
    """A single statement entry as returned by Caju"""
    id: Optional[str] = None
    action: Optional[str] = None
    amount: Optional[int] = None
    status: Optional[CajuItemStatus] = None
    created_at: datetime
    data: Optional[CajuItemData] = None
    normalized_name: Optional[str] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value):
        if isinstance(value, str):
            return datetime.strptime(value, TIMESTAMP_FORMAT)
        return value


class StatementEntry(CajuModel):
    cursor: Optional[str] = None
    item: CajuStatementItem


class StatementPage(CajuModel):
    has_next: bool
    items: List[StatementEntry] = Field(default_factory=list)


@dataclass(frozen=True)
class StatementQuery:
    """Query parameters for one statement page"""
    limit: int = 2
    cursor: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def with_cursor(self, cursor: Optional[str]) -> "StatementQuery":
        return replace(self, cursor=cursor)

    def with_date_range(self, date_range: Optional[Tuple[date, date]]) -> "StatementQuery":
        if date_range is None:
            return replace(self, start_date=None, end_date=None)
        start_date, end_date = date_range
        return replace(self, start_date=start_date, end_date=end_date)

    def with_limit(self, limit: int) -> "StatementQuery":
        return replace(self, limit=limit)

    def to_params(self) -> Dict[str, str]:
        """Request parameters; absent values are sent as empty strings"""
        return {
            "limit": str(self.limit),
            "cursor": self.cursor or "",
            "order": "DESC",
            "start_date": self.start_date.isoformat() if self.start_date else "",
            "end_date": self.end_date.isoformat() if self.end_date else "",
        }


def is_settled(item: CajuStatementItem) -> bool:
    return item.status is CajuItemStatus.CONFIRMED


def transaction_kind(item: CajuStatementItem) -> TransactionKind:
    """Anything but an explicit debit with an action present counts as credit"""
    if item.action is None or item.action == TransactionKind.DEBIT.value:
        return TransactionKind.DEBIT
    return TransactionKind.CREDIT


def describe(item: CajuStatementItem) -> str:
    if item.data is not None and item.data.merchant_name is not None:
        return item.data.merchant_name
    if item.action == TransactionKind.CREDIT.value:
        return DEPOSIT_DESCRIPTION
    return "unknown"


def to_transaction(item: CajuStatementItem) -> Transaction:
    kind = transaction_kind(item)
    return Transaction(
        id=item.id or "",
        description=describe(item),
        kind=kind,
        timestamp=item.created_at,
        amount=amount_from_minor_units(item.amount or 0, kind),
    )


def convert(items: Sequence[CajuStatementItem]) -> Statement:
    """Convert Caju statement items into a canonical statement.

    Raises:
        EmptyStatementError: If ``items`` is empty
    """
    return Statement.from_items(
        ACCOUNT_LABEL,
        items,
        timestamp_of=lambda item: item.created_at,
        is_settled=is_settled,
        to_transaction=to_transaction,
    )


class CajuClient:
    """Client for the Caju statement API"""

    name = ACCOUNT_LABEL

    def __init__(self,
                 base_url: str,
                 user_id: str,
                 employee_id: str,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.employee_id = employee_id
        self.session = session or build_session()
        self.timeout = timeout

    def login(self,
              existing_token: Union[str, SecretStr],
              refresh_token: Union[str, SecretStr]) -> LoginResponse:
        """Exchange the token pair for a fresh bearer token.

        On success every later request on this client carries the new token.
        """
        response = send(
            self.session,
            "POST",
            f"{self.base_url}/v1/user/{self.user_id}/bearer_token",
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {reveal(existing_token)}"},
            json={"refreshToken": reveal(refresh_token)},
        )
        login = parse_body(LoginResponse, response.text)

        self.session.headers["Authorization"] = f"Bearer {login.bearer_token.get_secret_value()}"
        logger.info("Logged in to Caju as user %s", self.user_id)
        return login

    def fetch_page(self,
                   limit: int = 2,
                   cursor: Optional[str] = None,
                   date_range: Optional[Tuple[date, date]] = None) -> StatementPage:
        """Fetch one statement page, newest items first"""
        query = StatementQuery().with_limit(limit).with_cursor(cursor).with_date_range(date_range)
        response = send(
            self.session,
            "GET",
            f"{self.base_url}/v1/employee/{self.employee_id}/statement",
            timeout=self.timeout,
            params=query.to_params(),
        )
        return parse_body(StatementPage, response.text)

    def fetch_month(self, month: int, year: Optional[int] = None) -> List[CajuStatementItem]:
        """Fetch every statement item of a month, following the cursor.

        The next cursor is taken from the last item of each page. Stops when
        the server reports no further pages or returns an empty page.
        """
        date_range = month_bounds(month, year)

        items: List[CajuStatementItem] = []
        cursor: Optional[str] = None
        has_next = True
        while has_next:
            page = self.fetch_page(limit=MONTH_PAGE_SIZE, cursor=cursor, date_range=date_range)
            has_next = page.has_next
            if not page.items:
                break

            cursor = page.items[-1].cursor
            items.extend(entry.item for entry in page.items)
            logger.debug("Fetched %d Caju items (%d so far)", len(page.items), len(items))

        logger.info("Fetched %d Caju items for %s to %s", len(items), *date_range)
        return items

    def convert(self, items: Sequence[CajuStatementItem]) -> Statement:
        return convert(items)
