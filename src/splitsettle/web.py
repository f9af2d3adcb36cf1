"""HTTP-интерфейс: POST /settlements считает балансы и переводы за один запрос."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pydantic
from aiohttp import web
from pydantic import BaseModel, ConfigDict, Field, field_validator

from splitsettle.config import get_settings
from splitsettle.logging import configure_logging, get_logger
from splitsettle.models import Expense, Participant
from splitsettle.services.balances import compute_balances
from splitsettle.services.settlement import resolve_settlements, round_amount
from splitsettle.services.validation import MAX_AMOUNT, UnknownParticipant, ValidationError

log = get_logger(__name__)


class ParticipantIn(BaseModel):
    id: str = Field(min_length=1)
    name: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


class ExpenseIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    description: str
    amount: Decimal = Field(gt=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    paid_by: str = Field(alias="paidBy", min_length=1)
    split_among: list[str] = Field(alias="splitAmong", min_length=1)

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def _float_as_text(cls, value: Any) -> Any:
        if isinstance(value, float):
            return str(value)
        return value

    def to_expense(self) -> Expense:
        return Expense(
            id=self.id,
            description=self.description,
            amount=self.amount,
            paid_by=self.paid_by,
            split_among=tuple(dict.fromkeys(self.split_among)),
        )


class SettlementRequest(BaseModel):
    participants: list[ParticipantIn]
    expenses: list[ExpenseIn]


def _error(status: int, **body: Any) -> web.Response:
    return web.json_response(body, status=status)


def _money(amount: Decimal) -> float:
    return float(round_amount(amount))


def _expense_field(expenses: list[ExpenseIn], exc: UnknownParticipant) -> str:
    for index, expense in enumerate(expenses):
        if expense.id != exc.expense_id:
            continue
        if expense.paid_by == exc.participant_id:
            return f"expenses.{index}.paidBy"
        return f"expenses.{index}.splitAmong"
    return "expenses"


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def create_settlements(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except ValueError:
        log.info("http.request.rejected", reason="invalid_json")
        return _error(400, error="invalid_json", message="request body must be JSON")

    try:
        data = SettlementRequest.model_validate(payload)
    except pydantic.ValidationError as exc:
        fields = [
            {"field": ".".join(str(part) for part in err["loc"]), "reason": err["msg"]}
            for err in exc.errors()
        ]
        log.info("http.request.rejected", reason="validation", fields=[f["field"] for f in fields])
        return _error(422, error="validation", fields=fields)

    participants = [Participant(id=p.id, name=p.name) for p in data.participants]
    expenses = [e.to_expense() for e in data.expenses]

    try:
        balances = compute_balances(participants, expenses)
    except UnknownParticipant as exc:
        log.info(
            "http.request.rejected",
            reason="unknown_participant",
            participant_id=exc.participant_id,
            expense_id=exc.expense_id,
        )
        return _error(
            422,
            error="unknown_participant",
            field=_expense_field(data.expenses, exc),
            participant_id=exc.participant_id,
            expense_id=exc.expense_id,
        )
    except ValidationError as exc:
        log.info("http.request.rejected", reason="validation", fields=[exc.field])
        return _error(422, error="validation", fields=[{"field": exc.field, "reason": exc.reason}])

    names = {p.id: p.name for p in participants}
    settlements = resolve_settlements(balances, names)
    log.info("http.settlements.resolved", participants=len(participants), settlements=len(settlements))

    return web.json_response(
        {
            "balances": {participant_id: _money(amount) for participant_id, amount in balances.items()},
            "settlements": [
                {"from": s.from_participant, "to": s.to_participant, "amount": float(s.amount)}
                for s in settlements
            ],
        }
    )


def create_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/health", health)
    app.router.add_post("/settlements", create_settlements)
    return app


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level_value)
    log.info("http.start", host=settings.http_host, port=settings.http_port)
    web.run_app(create_app(), host=settings.http_host, port=settings.http_port, print=None)


if __name__ == "__main__":
    run()
