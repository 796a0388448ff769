"""
Desk-calculator state machine.

The calculator is a chained two-operand accumulator: pressing an operator
while another one is pending folds the running value left to right, with no
operator precedence. Every action is a pure transition
``(state, action) -> Transition`` where the transition carries the next state
and the history commits produced along the way (only a successful ``=``
produces one).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Optional

from calculation.formatting import ERROR, number_to_string, parse_float


class Operation(StrEnum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"

    @property
    def symbol(self) -> str:
        """Operator as written in a history expression."""
        return _EXPRESSION_SYMBOLS[self]

    @property
    def display_symbol(self) -> str:
        """Operator as shown next to the pending value."""
        return _DISPLAY_SYMBOLS[self]

    def apply(self, left: float, right: float) -> float:
        if self is Operation.ADD:
            return left + right
        if self is Operation.SUB:
            return left - right
        if self is Operation.MUL:
            return left * right
        return left / right if right != 0 else math.nan


_EXPRESSION_SYMBOLS = {
    Operation.ADD: "+",
    Operation.SUB: "-",
    Operation.MUL: "*",
    Operation.DIV: "/",
}

_DISPLAY_SYMBOLS = {**_EXPRESSION_SYMBOLS, Operation.MUL: "x"}


class ActionKind(StrEnum):
    DIGIT = "digit"
    DECIMAL = "decimal"
    CLEAR = "clear"
    CLEAR_ENTRY = "clear_entry"
    BACKSPACE = "backspace"
    TOGGLE_SIGN = "toggle_sign"
    PERCENT = "percent"
    OPERATION = "operation"
    EVALUATE = "evaluate"
    RECALL = "recall"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    digit: Optional[str] = None
    operation: Optional[Operation] = None
    result: Optional[str] = None


@dataclass(frozen=True)
class CalculatorState:
    display: str = "0"
    previous_value: Optional[str] = None
    pending_operation: Optional[Operation] = None
    waiting_for_operand: bool = False

    @property
    def pending_symbol(self) -> str:
        if self.pending_operation is None:
            return ""
        return self.pending_operation.display_symbol


@dataclass(frozen=True)
class HistoryCommit:
    expression: str
    result: str


@dataclass(frozen=True)
class Transition:
    state: CalculatorState
    commits: tuple[HistoryCommit, ...] = field(default_factory=tuple)


def _to_display(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        return ERROR
    return number_to_string(value)


def _compute(previous_value: str, operation: Operation, display: str) -> str:
    return _to_display(operation.apply(parse_float(previous_value), parse_float(display)))


def input_digit(state: CalculatorState, digit: str) -> Transition:
    if len(digit) != 1 or digit not in "0123456789":
        raise ValueError(f"Not a digit: {digit!r}")
    if state.waiting_for_operand:
        return Transition(replace(state, display=digit, waiting_for_operand=False))
    if state.display in ("0", ERROR):
        return Transition(replace(state, display=digit))
    return Transition(replace(state, display=state.display + digit))


def input_decimal(state: CalculatorState) -> Transition:
    if state.waiting_for_operand or state.display == ERROR:
        return Transition(replace(state, display="0.", waiting_for_operand=False))
    if "." in state.display:
        return Transition(state)
    return Transition(replace(state, display=state.display + "."))


def clear(state: CalculatorState) -> Transition:
    return Transition(CalculatorState())


def clear_entry(state: CalculatorState) -> Transition:
    return Transition(replace(state, display="0"))


def backspace(state: CalculatorState) -> Transition:
    remaining = state.display[:-1]
    if state.display == ERROR or remaining in ("", "-"):
        return Transition(replace(state, display="0"))
    return Transition(replace(state, display=remaining))


def toggle_sign(state: CalculatorState) -> Transition:
    if state.display in ("0", ERROR):
        return Transition(state)
    if state.display.startswith("-"):
        return Transition(replace(state, display=state.display[1:]))
    return Transition(replace(state, display="-" + state.display))


def input_percent(state: CalculatorState) -> Transition:
    # Literal value / 100; the pending operation is not consulted.
    return Transition(
        replace(state, display=_to_display(parse_float(state.display) / 100))
    )


def perform_operation(state: CalculatorState, operation: Operation) -> Transition:
    next_state = replace(
        state, pending_operation=Operation(operation), waiting_for_operand=True
    )
    if state.previous_value is None:
        return Transition(replace(next_state, previous_value=state.display))
    if state.pending_operation is not None:
        folded = _compute(state.previous_value, state.pending_operation, state.display)
        return Transition(replace(next_state, display=folded, previous_value=folded))
    return Transition(next_state)


def evaluate(state: CalculatorState) -> Transition:
    if state.pending_operation is None or state.previous_value is None:
        return Transition(state)
    result = _compute(state.previous_value, state.pending_operation, state.display)
    expression = (
        f"{state.previous_value} {state.pending_operation.symbol} {state.display}"
    )
    next_state = CalculatorState(display=result, waiting_for_operand=True)
    if result == ERROR:
        return Transition(next_state)
    return Transition(next_state, (HistoryCommit(expression=expression, result=result),))


def recall(state: CalculatorState, result: str) -> Transition:
    """Load a stored history result into the display as a finished value."""
    if result != ERROR and math.isnan(parse_float(result)):
        raise ValueError(f"Not a numeric result: {result!r}")
    return Transition(CalculatorState(display=result, waiting_for_operand=True))


def apply(state: CalculatorState, action: Action) -> Transition:
    """Dispatch ``action`` against ``state``."""
    kind = ActionKind(action.kind)
    if kind is ActionKind.DIGIT:
        if action.digit is None:
            raise ValueError("digit action requires a digit")
        return input_digit(state, action.digit)
    if kind is ActionKind.OPERATION:
        if action.operation is None:
            raise ValueError("operation action requires an operation")
        return perform_operation(state, action.operation)
    if kind is ActionKind.RECALL:
        if action.result is None:
            raise ValueError("recall action requires a result")
        return recall(state, action.result)
    return _SIMPLE_ACTIONS[kind](state)


_SIMPLE_ACTIONS = {
    ActionKind.DECIMAL: input_decimal,
    ActionKind.CLEAR: clear,
    ActionKind.CLEAR_ENTRY: clear_entry,
    ActionKind.BACKSPACE: backspace,
    ActionKind.TOGGLE_SIGN: toggle_sign,
    ActionKind.PERCENT: input_percent,
    ActionKind.EVALUATE: evaluate,
}

_KEY_OPERATIONS = {
    "+": Operation.ADD,
    "-": Operation.SUB,
    "*": Operation.MUL,
    "/": Operation.DIV,
}

_KEY_ACTIONS = {
    ".": ActionKind.DECIMAL,
    "Enter": ActionKind.EVALUATE,
    "=": ActionKind.EVALUATE,
    "Escape": ActionKind.CLEAR,
    "Backspace": ActionKind.BACKSPACE,
    "%": ActionKind.PERCENT,
}


def action_for_key(key: str) -> Optional[Action]:
    """Map a keyboard key to a calculator action; unmapped keys give None."""
    if len(key) == 1 and key in "0123456789":
        return Action(ActionKind.DIGIT, digit=key)
    if key in _KEY_OPERATIONS:
        return Action(ActionKind.OPERATION, operation=_KEY_OPERATIONS[key])
    if key in _KEY_ACTIONS:
        return Action(_KEY_ACTIONS[key])
    return None


def run(actions, state: Optional[CalculatorState] = None) -> Transition:
    """Apply a sequence of actions, collecting every commit emitted on the way."""
    state = state or CalculatorState()
    commits: list[HistoryCommit] = []
    for action in actions:
        transition = apply(state, action)
        state = transition.state
        commits.extend(transition.commits)
    return Transition(state, tuple(commits))
