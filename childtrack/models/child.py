from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


Sex = Literal["male", "female", "other"]


class ChildBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    sex: Sex
    image_url: Optional[str] = Field(None, max_length=500)


class ChildCreate(ChildBase):
    """Payload to register a child."""
    pass


class ChildUpdate(BaseModel):
    """Payload to update a child: all fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    sex: Optional[Sex] = None
    image_url: Optional[str] = Field(None, max_length=500)


class Child(ChildBase):
    """Full model returned from the database."""
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}

    def age_in_months(self, today: date) -> int:
        months = (today.year - self.date_of_birth.year) * 12 + today.month - self.date_of_birth.month
        if today.day < self.date_of_birth.day:
            months -= 1
        return max(0, months)
