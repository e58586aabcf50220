from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Who is asking, resolved once per request and passed down explicitly."""
    user_id: Optional[str]
    role: str

    @classmethod
    def from_request(cls, request) -> "Identity":
        user = request.user
        if not user or not user.is_authenticated:
            return cls(user_id=None, role="ANONYMOUS")
        return cls(user_id=str(user.pk), role=getattr(user, "role", "USER"))

    def __str__(self) -> str:
        return f"{self.role}:{self.user_id or '-'}"
