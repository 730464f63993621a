"""ORM Models — SQLAlchemy declarative models for rosters and participants.

Invariants:
    - All models inherit from Base (db/base.py)
    - RosterRow is the aggregate root; participants are scoped by roster_id

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from rosterbot.models.roster import RosterRow  # noqa: F401
from rosterbot.models.participant import ParticipantRow  # noqa: F401
