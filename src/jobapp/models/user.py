from typing import Optional

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """The authenticated account as reported by /auth/me/."""

    model_config = ConfigDict(extra="ignore")

    id: int
    email: str
    user_type: str = "seeker"
    phone: Optional[str] = None

    @property
    def is_employer(self) -> bool:
        return self.user_type == "employer"


class Profile(BaseModel):
    """Seeker or employer profile; only the naming fields matter to the client."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    company_name: Optional[str] = None

    @property
    def legal_name(self) -> str:
        """Full name used as the expected contract signature."""
        if self.full_name and self.full_name.strip():
            return " ".join(self.full_name.split())
        parts = [self.first_name or "", self.last_name or ""]
        return " ".join(" ".join(parts).split())
