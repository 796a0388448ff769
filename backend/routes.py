"""
HTTP routes for the calculation service.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response

from backend import worker
from backend.config import Settings, get_settings
from backend.db import HistoryEntry, HistoryStore
from backend.dependencies import get_commit_queue, get_history_store
from backend.queue import CommitQueue
from backend.schemas import (
    CalculatorActionRequest,
    CalculatorActionResponse,
    CalculatorKeyRequest,
    CalculatorStatePayload,
    CategoryResponse,
    ClearHistoryResponse,
    ConvertRequest,
    ConvertResponse,
    HistoryCommitPayload,
    HistoryEntryResponse,
    ListCategoriesResponse,
    ListHistoryResponse,
    ReferenceRequest,
    ReferenceResponse,
    ReferenceRowResponse,
    UnitResponse,
)
from calculation import calculator
from calculation.converter import ConverterSession, accepts_input
from calculation.units import REGISTRY, CategoryDefinition

logger = logging.getLogger(__name__)

router = APIRouter()


def _category_response(category: CategoryDefinition) -> CategoryResponse:
    return CategoryResponse(
        key=category.key,
        name=category.name,
        base_name=category.base_name,
        default_from_unit=category.default_from_unit,
        default_to_unit=category.default_to_unit,
        units=[
            UnitResponse(
                key=unit.key,
                name=unit.name,
                abbreviation=unit.abbreviation,
                system=unit.system,
                to_base=unit.to_base,
            )
            for unit in category.units
        ],
    )


def _day_label(created_at: datetime, now: datetime) -> str:
    if created_at.date() == now.date():
        return "Today"
    if created_at.date() == (now - timedelta(days=1)).date():
        return "Yesterday"
    return f"{created_at:%b} {created_at.day}"


def _history_response(entry: HistoryEntry, now: datetime) -> HistoryEntryResponse:
    created_at = datetime.fromtimestamp(entry.created_at, tz=timezone.utc)
    return HistoryEntryResponse(
        id=entry.id,
        expression=entry.expression,
        result=entry.result,
        created_at=created_at,
        group=_day_label(created_at, now),
    )


def _dispatch(
    transition: calculator.Transition,
    queue: CommitQueue,
    db: HistoryStore,
    background_tasks: BackgroundTasks,
    settings: Settings,
) -> CalculatorActionResponse:
    """Queue the transition's commits and build the response; persistence happens after."""
    for commit in transition.commits:
        queue.enqueue(commit)
    if transition.commits and settings.drain_commits_inline:
        background_tasks.add_task(worker.drain, db=db, queue=queue)
    return CalculatorActionResponse(
        state=CalculatorStatePayload.from_state(transition.state),
        pending_symbol=transition.state.pending_symbol,
        commits=[
            HistoryCommitPayload(expression=c.expression, result=c.result)
            for c in transition.commits
        ],
    )


@router.get("/units", response_model=ListCategoriesResponse)
def list_units():
    return ListCategoriesResponse(
        categories=[_category_response(c) for c in REGISTRY.categories()]
    )


@router.get("/units/{category}", response_model=CategoryResponse)
def get_units(category: str):
    try:
        definition = REGISTRY.get_category(category)
    except ValueError:
        raise HTTPException(status_code=404, detail="Unknown unit category")
    return _category_response(definition)


@router.post("/convert", response_model=ConvertResponse)
def convert_value(payload: ConvertRequest):
    if not accepts_input(payload.value):
        raise HTTPException(status_code=422, detail="Value must be a decimal number")
    session = ConverterSession(
        category=payload.category,
        from_unit=payload.from_unit,
        to_unit=payload.to_unit,
        input_value=payload.value,
    )
    return ConvertResponse(
        category=session.category,
        from_unit=session.from_unit,
        to_unit=session.to_unit,
        value=session.input_value,
        result=session.result,
        hint=session.hint,
    )


@router.post("/convert/reference", response_model=ReferenceResponse)
def quick_reference(payload: ReferenceRequest):
    session = ConverterSession(
        category=payload.category,
        from_unit=payload.from_unit,
        to_unit=payload.to_unit,
    )
    return ReferenceResponse(
        rows=[
            ReferenceRowResponse(input=row.input, output=row.output)
            for row in session.quick_reference()
        ]
    )


@router.post("/calculator/apply", response_model=CalculatorActionResponse)
def apply_action(
    payload: CalculatorActionRequest,
    background_tasks: BackgroundTasks,
    queue: CommitQueue = Depends(get_commit_queue),
    db: HistoryStore = Depends(get_history_store),
    settings: Settings = Depends(get_settings),
):
    """
    Apply one calculator action to the posted state and return the next state.
    """
    action = calculator.Action(
        kind=payload.action,
        digit=payload.digit,
        operation=payload.operation,
        result=payload.result,
    )
    try:
        transition = calculator.apply(payload.state.to_state(), action)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _dispatch(transition, queue, db, background_tasks, settings)


@router.post("/calculator/key", response_model=CalculatorActionResponse)
def press_key(
    payload: CalculatorKeyRequest,
    background_tasks: BackgroundTasks,
    queue: CommitQueue = Depends(get_commit_queue),
    db: HistoryStore = Depends(get_history_store),
    settings: Settings = Depends(get_settings),
):
    state = payload.state.to_state()
    action = calculator.action_for_key(payload.key)
    if action is None:
        # Unmapped keys leave the calculator untouched.
        transition = calculator.Transition(state)
    else:
        transition = calculator.apply(state, action)
    return _dispatch(transition, queue, db, background_tasks, settings)


@router.get("/history", response_model=ListHistoryResponse)
def list_history(
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: HistoryStore = Depends(get_history_store),
    settings: Settings = Depends(get_settings),
):
    now = datetime.now(timezone.utc)
    entries = db.list(limit=limit or settings.history_page_size)
    return ListHistoryResponse(
        entries=[_history_response(entry, now) for entry in entries]
    )


@router.post("/history", response_model=HistoryEntryResponse, status_code=201)
def save_history(
    payload: HistoryCommitPayload, db: HistoryStore = Depends(get_history_store)
):
    entry = db.append(payload.expression, payload.result)
    return _history_response(entry, datetime.now(timezone.utc))


@router.get("/history/{entry_id}", response_model=HistoryEntryResponse)
def get_history_entry(
    entry_id: str, db: HistoryStore = Depends(get_history_store)
):
    entry = db.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="History entry not found")
    return _history_response(entry, datetime.now(timezone.utc))


@router.delete("/history/{entry_id}", status_code=204)
def delete_history_entry(
    entry_id: str, db: HistoryStore = Depends(get_history_store)
):
    if not db.remove(entry_id):
        raise HTTPException(status_code=404, detail="History entry not found")
    return Response(status_code=204)


@router.delete("/history", response_model=ClearHistoryResponse)
def clear_history(db: HistoryStore = Depends(get_history_store)):
    removed = db.clear()
    logger.info("Cleared %d history entries", removed)
    return ClearHistoryResponse(status="ok", removed=removed)
