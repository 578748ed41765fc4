from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class SplitType(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    SHARES = "shares"


class AuditOperation(str, Enum):
    BALANCE_CALCULATION = "balance_calculation"
    SETTLEMENT_OPTIMIZATION = "settlement_optimization"
    VALIDATION = "validation"


class SplitDetail(BaseModel):
    participant: str = Field(..., min_length=1)
    amount: Optional[Decimal] = Field(default=None, decimal_places=2)
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    shares: Optional[int] = Field(default=None, gt=0)

    model_config = ConfigDict(frozen=True)


class Transaction(BaseModel):
    id: str
    paid_by: str = Field(..., min_length=1, description="Participant who paid the expense")
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: str = Field(..., min_length=1)
    participants: list[str] = Field(..., min_length=1)
    split_type: SplitType = SplitType.EQUAL
    split_details: list[SplitDetail] = Field(default_factory=list)
    date: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "tx-1",
            "paid_by": "Alice",
            "amount": 100.00,
            "description": "Dinner",
            "participants": ["Alice", "Bob"],
            "split_type": "equal",
            "split_details": []
        }
    })

    @field_validator("participants")
    @classmethod
    def _unique_participants(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("participants must be unique")
        return value


class Balance(BaseModel):
    participant: str
    amount: Decimal


class Settlement(BaseModel):
    from_participant: str = Field(..., alias="from")
    to_participant: str = Field(..., alias="to")
    amount: Decimal = Field(..., gt=0)

    model_config = ConfigDict(populate_by_name=True)


class SettlementResult(BaseModel):
    balances: list[Balance]
    settlements: list[Settlement]
    total_transactions: int
    total_amount: Decimal
    optimized_transaction_count: int


class ValidationIssue(BaseModel):
    field: str
    message: str
    value: Any = None


class AuditEntry(BaseModel):
    timestamp: datetime
    operation: AuditOperation
    input: Any
    output: Any


class SettleRequest(BaseModel):
    transactions: list[Transaction]
    all_participants: Optional[list[str]] = None
    strict_splits: bool = Field(default=False, description="Reject transactions whose split does not add up")


class SettleAudit(BaseModel):
    timestamp: datetime
    transaction_count: int
    participant_count: int
    participants: list[str]


class SettleResponse(SettlementResult):
    audit: SettleAudit


class ValidateSettlementsRequest(BaseModel):
    balances: list[Balance]
    settlements: list[Settlement]


class ValidateSettlementsResponse(BaseModel):
    valid: bool


class SplitCheckResponse(BaseModel):
    valid: bool
    issues: list[ValidationIssue]
    amounts: dict[str, Decimal]


class AuditRequest(BaseModel):
    transactions: list[Transaction]
    all_participants: Optional[list[str]] = None
