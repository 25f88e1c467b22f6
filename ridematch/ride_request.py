from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RideRequest:
    request_id: str
    pickup: int
    destination: int
    requester_id: str
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'request_id': self.request_id,
            'pickup': self.pickup,
            'destination': self.destination,
            'requester_id': self.requester_id,
            'created_at': self.created_at.isoformat()
        }
