from datetime import date
from typing import Literal

from fastapi import APIRouter, Query
from pydantic import BaseModel

from app.core.config import settings
from timesheet.models import PayPeriod
from timesheet.pay_period import navigate_pay_period, resolve_pay_period

router = APIRouter(prefix="/pay-periods", tags=["pay-periods"])


class PayPeriodOut(BaseModel):
    start: date
    end: date
    label: str

    @classmethod
    def from_period(cls, period: PayPeriod) -> "PayPeriodOut":
        return cls(start=period.start, end=period.end, label=period.label)


@router.get("/resolve", response_model=PayPeriodOut)
def resolve(day: date | None = Query(default=None, alias="date")) -> PayPeriodOut:
    period = resolve_pay_period(day or date.today(), settings.pay_period_anchor)
    return PayPeriodOut.from_period(period)


@router.get("/{start}/{direction}", response_model=PayPeriodOut)
def navigate(start: date, direction: Literal["next", "prev"]) -> PayPeriodOut:
    return PayPeriodOut.from_period(navigate_pay_period(start, direction, settings.pay_period_anchor))