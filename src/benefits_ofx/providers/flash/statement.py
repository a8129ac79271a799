"""Flash statement models, request building and conversion."""

import calendar
import json
import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel

from ...models.core import Statement, Transaction, TransactionKind, amount_from_minor_units
from ...utils.dates import resolve_year


logger = logging.getLogger(__name__)

ACCOUNT_LABEL = "Flash"
BFF_URL = "https://corporate-card-bff.us.flashapp.services/bff/trpc"
PAGE_SIZE = 100
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
QUERY_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"


class FlashTransactionStatus(str, Enum):
    COMPLETED = "COMPLETED"


class FlashTransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    OPEN_LOOP_PAYMENT = "OPEN_LOOP_PAYMENT"


class FlashTransaction(BaseModel):
    """A single statement entry as returned by Flash"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    date: datetime
    amount: NonNegativeInt
    description: str
    status: FlashTransactionStatus
    type_: FlashTransactionType = Field(alias="type")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value):
        if isinstance(value, str):
            return datetime.strptime(value, TIMESTAMP_FORMAT)
        return value


class FlashModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StatementMeta(FlashModel):
    current_page: Optional[int] = None
    total_items: Optional[int] = None
    total_pages: Optional[int] = None
    page_size: Optional[int] = None


class StatementPayload(FlashModel):
    items: List[FlashTransaction] = Field(default_factory=list)
    meta: Optional[StatementMeta] = None


class StatementData(FlashModel):
    json_: Optional[StatementPayload] = Field(default=None, alias="json")


class StatementResult(FlashModel):
    data: Optional[StatementData] = None


class BatchResponse(FlashModel):
    result: Optional[StatementResult] = None


def statement_window(month: int, year: Optional[int] = None) -> Tuple[datetime, datetime]:
    """Query window for a month: 03:00 on day one (midnight in UTC-3) to
    23:59:59 on the last calendar day."""
    year = resolve_year(year)
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime(year, month, 1, 3, 0, 0),
        datetime(year, month, last_day, 23, 59, 59),
    )


def build_statement_input(start: datetime, end: datetime, page_size: int = PAGE_SIZE) -> str:
    """tRPC batch input for ``person.getStatement``, first page only"""
    query = {
        "0": {
            "json": {
                "pagination": {
                    "currentPage": 0,
                    "pageSize": page_size,
                },
                "filter": {
                    "startDate": start.strftime(QUERY_TIMESTAMP_FORMAT),
                    "endDate": end.strftime(QUERY_TIMESTAMP_FORMAT),
                },
            },
            "meta": {
                "values": {
                    "filter.endDate": ["Date"],
                    "filter.startDate": ["Date"],
                },
            },
        },
    }
    return json.dumps(query, separators=(",", ":"))


def extract_items(batch: Sequence[BatchResponse]) -> List[FlashTransaction]:
    """Unwrap the items of the last batch entry.

    A missing entry or envelope level yields no items.
    """
    if not batch:
        return []

    result = batch[-1].result
    if result is None or result.data is None or result.data.json_ is None:
        return []

    payload = result.data.json_
    meta = payload.meta
    if meta is not None and meta.total_items is not None and meta.total_items > len(payload.items):
        logger.warning(
            "Flash statement truncated: %d of %d items returned",
            len(payload.items), meta.total_items
        )
    return payload.items


def is_settled(transaction: FlashTransaction) -> bool:
    return transaction.status is FlashTransactionStatus.COMPLETED


def to_transaction(transaction: FlashTransaction) -> Transaction:
    if transaction.type_ is FlashTransactionType.DEPOSIT:
        kind = TransactionKind.CREDIT
    else:
        kind = TransactionKind.DEBIT

    return Transaction(
        id=transaction.id,
        description=transaction.description,
        kind=kind,
        timestamp=transaction.date,
        amount=amount_from_minor_units(transaction.amount, kind),
    )


def convert(transactions: Sequence[FlashTransaction]) -> Statement:
    """Convert Flash transactions into a canonical statement.

    Raises:
        EmptyStatementError: If ``transactions`` is empty
    """
    return Statement.from_items(
        ACCOUNT_LABEL,
        transactions,
        timestamp_of=lambda transaction: transaction.date,
        is_settled=is_settled,
        to_transaction=to_transaction,
    )
