"""Pydantic model for the applicant's saved sender details."""

from __future__ import annotations

from pydantic import BaseModel


class UserSettings(BaseModel):
    name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""

    @property
    def city_line(self) -> str:
        """'City, ST 10001' with missing parts left out."""
        line = ", ".join(p for p in (self.city, self.state) if p)
        return f"{line} {self.zip_code}".strip() if self.zip_code else line
