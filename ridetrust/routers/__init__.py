"""RideTrust Routers Package"""

from ridetrust.routers import (
    audit,
    ratings,
    trust,
    users,
)

__all__ = [
    "audit",
    "ratings",
    "trust",
    "users",
]
