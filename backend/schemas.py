"""
Pydantic schemas for the calculation API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from calculation.calculator import ActionKind, CalculatorState, Operation
from calculation.units import UnitCategory, UnitSystem


class UnitResponse(BaseModel):
    key: str
    name: str
    abbreviation: str
    system: UnitSystem
    to_base: float


class CategoryResponse(BaseModel):
    key: UnitCategory
    name: str
    base_name: str
    default_from_unit: str
    default_to_unit: str
    units: list[UnitResponse]


class ListCategoriesResponse(BaseModel):
    categories: list[CategoryResponse]


class ConvertRequest(BaseModel):
    category: UnitCategory
    from_unit: str = Field(..., max_length=16)
    to_unit: str = Field(..., max_length=16)
    value: str = Field("1", max_length=64)


class ConvertResponse(BaseModel):
    category: UnitCategory
    from_unit: str
    to_unit: str
    value: str
    result: str
    hint: str


class ReferenceRequest(BaseModel):
    category: UnitCategory
    from_unit: str = Field(..., max_length=16)
    to_unit: str = Field(..., max_length=16)


class ReferenceRowResponse(BaseModel):
    input: float
    output: str


class ReferenceResponse(BaseModel):
    rows: list[ReferenceRowResponse]


# A decimal numeral as the calculator writes it (exponent form included), or "Error".
DISPLAY_PATTERN = r"^(?:-?(?:\d+\.?\d*|\.\d+)(?:e[+-]\d+)?|Error)$"


class CalculatorStatePayload(BaseModel):
    display: str = Field("0", max_length=64, pattern=DISPLAY_PATTERN)
    previous_value: Optional[str] = Field(
        None, max_length=64, pattern=DISPLAY_PATTERN
    )
    pending_operation: Optional[Operation] = None
    waiting_for_operand: bool = False

    @classmethod
    def from_state(cls, state: CalculatorState) -> "CalculatorStatePayload":
        return cls(
            display=state.display,
            previous_value=state.previous_value,
            pending_operation=state.pending_operation,
            waiting_for_operand=state.waiting_for_operand,
        )

    def to_state(self) -> CalculatorState:
        return CalculatorState(
            display=self.display,
            previous_value=self.previous_value,
            pending_operation=self.pending_operation,
            waiting_for_operand=self.waiting_for_operand,
        )


class CalculatorActionRequest(BaseModel):
    state: CalculatorStatePayload = Field(default_factory=CalculatorStatePayload)
    action: ActionKind
    digit: Optional[str] = Field(None, pattern=r"^[0-9]$")
    operation: Optional[Operation] = None
    result: Optional[str] = Field(None, max_length=64, pattern=DISPLAY_PATTERN)


class CalculatorKeyRequest(BaseModel):
    state: CalculatorStatePayload = Field(default_factory=CalculatorStatePayload)
    key: str = Field(..., min_length=1, max_length=16)


class HistoryCommitPayload(BaseModel):
    expression: str = Field(..., min_length=1, max_length=256)
    result: str = Field(..., min_length=1, max_length=64)


class CalculatorActionResponse(BaseModel):
    state: CalculatorStatePayload
    pending_symbol: str
    commits: list[HistoryCommitPayload]


class HistoryEntryResponse(BaseModel):
    id: str
    expression: str
    result: str
    created_at: datetime
    group: str


class ListHistoryResponse(BaseModel):
    entries: list[HistoryEntryResponse]


class ClearHistoryResponse(BaseModel):
    status: Literal["ok"]
    removed: int
