import math
from dataclasses import dataclass


@dataclass
class ReviewTokenPayload:
    order_id: str
    email: str
    exp: int  # epoch milliseconds

    def to_dict(self) -> dict:
        return {"order_id": self.order_id, "email": self.email, "exp": self.exp}

    @classmethod
    def from_dict(cls, data) -> "ReviewTokenPayload | None":
        """Build a payload from decoded JSON. Unknown keys are dropped.

        Returns None when a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            return None
        order_id = data.get("order_id")
        email = data.get("email")
        exp = data.get("exp")
        if not isinstance(order_id, str) or not isinstance(email, str):
            return None
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        if not math.isfinite(exp):
            return None
        return cls(order_id=order_id, email=email, exp=int(exp))
