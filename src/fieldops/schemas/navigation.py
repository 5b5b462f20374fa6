"""Navigation snapshot exchanged across the history boundary."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

RETURN_TO_AGENT_DETAILS = "employeeDetails"


class NavigationSnapshot(BaseModel):
    """The console's {region, agent, date range, page} tuple."""

    return_to: Literal["employeeDetails"] = Field(default=RETURN_TO_AGENT_DETAILS, alias="returnTo")
    region: Optional[str] = Field(default=None, alias="state")
    agent: Optional[str] = Field(default=None, alias="employee")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    page: int = Field(default=1, ge=1, alias="currentPage")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_range(self) -> "NavigationSnapshot":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate.")
        return self


class ReturnSignal(BaseModel):
    """Incoming "return to previous view" signal from the history boundary.

    Besides ``returnTo`` it may carry the serialized tuple under the same
    wire names as :class:`NavigationSnapshot`.
    """

    return_to: Optional[str] = Field(default=None, alias="returnTo")
    region: Optional[str] = Field(default=None, alias="state")
    agent: Optional[str] = Field(default=None, alias="employee")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    page: Optional[int] = Field(default=None, ge=1, alias="currentPage")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_range(self) -> "ReturnSignal":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate.")
        return self

    @property
    def is_return(self) -> bool:
        return self.return_to == RETURN_TO_AGENT_DETAILS

    def carried_snapshot(self) -> Optional[NavigationSnapshot]:
        """The tuple carried in the signal, or ``None`` without a full date range."""
        if self.start_date is None or self.end_date is None:
            return None
        return NavigationSnapshot(
            region=self.region,
            agent=self.agent,
            start_date=self.start_date,
            end_date=self.end_date,
            page=self.page or 1,
        )
