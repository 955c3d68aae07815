"""Persistence layer for saved comparison scenarios.

Each saved scenario keeps its inputs (as produced by
``emi_calc.serialization.scenario_to_dict``), its summary and its schedule, so
a borrower can reload it or chart it against others. SQLite is the default for
local use; any SQLAlchemy-compatible URL works.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, Integer, String, create_engine, delete, select
from sqlalchemy.orm import declarative_base, sessionmaker

from emi_calc.logging_config import get_logger

logger = get_logger(__name__)

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///comparison_data.sqlite3"
DEFAULT_MAX_PER_USER = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedScenario(Base):
    __tablename__ = "saved_scenarios"

    # Insertion order; the newest rows survive trimming.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    scenario_id = Column(String(64), unique=True, nullable=False)
    owner = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    inputs = Column(JSON, nullable=False)
    summary = Column(JSON, nullable=False)
    schedule = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.scenario_id,
            "name": self.name,
            "inputs": self.inputs,
            "summary": self.summary,
            "schedule": self.schedule,
            "created_at": self.created_at.isoformat(),
        }


class ComparisonStore:
    """Saved scenarios keyed by an anonymous per-session owner token.

    Only the newest ``max_per_user`` scenarios of each owner are kept. Every
    method treats a missing token as an owner with nothing saved.
    """

    def __init__(self, url: str, *, max_per_user: int = DEFAULT_MAX_PER_USER) -> None:
        engine = create_engine(url, future=True)
        Base.metadata.create_all(engine)
        self._sessions = sessionmaker(engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    @staticmethod
    def _owned(owner: str):
        return select(SavedScenario).where(SavedScenario.owner == owner)

    def list_scenarios(self, owner: Optional[str]) -> List[Dict[str, Any]]:
        if not owner:
            return []
        with self._sessions() as session:
            rows = session.scalars(self._owned(owner).order_by(SavedScenario.seq))
            return [row.as_dict() for row in rows]

    def get_scenario(self, owner: Optional[str], scenario_id: str) -> Optional[Dict[str, Any]]:
        if not owner:
            return None
        with self._sessions() as session:
            row = session.scalars(self._owned(owner).where(SavedScenario.scenario_id == scenario_id)).first()
            return row.as_dict() if row else None

    def add_scenario(
        self,
        owner: Optional[str],
        scenario_id: str,
        name: str,
        inputs: dict,
        summary: dict,
        schedule: list,
    ) -> None:
        if not owner:
            return
        with self._sessions() as session:
            session.add(
                SavedScenario(
                    scenario_id=scenario_id,
                    owner=owner,
                    name=name,
                    inputs=inputs,
                    summary=summary,
                    schedule=schedule,
                )
            )
            if self._max_per_user > 0:
                session.flush()
                stale = session.scalars(
                    self._owned(owner).order_by(SavedScenario.seq.desc()).offset(self._max_per_user)
                ).all()
                for row in stale:
                    session.delete(row)
                if stale:
                    logger.debug("Dropped %d old scenario(s) for one owner", len(stale))
            session.commit()
        logger.info("Saved scenario %s (%s)", scenario_id, name)

    def remove_scenario(self, owner: Optional[str], scenario_id: Optional[str]) -> None:
        if not owner or not scenario_id:
            return
        with self._sessions() as session:
            session.execute(
                delete(SavedScenario).where(SavedScenario.owner == owner, SavedScenario.scenario_id == scenario_id)
            )
            session.commit()

    def clear_scenarios(self, owner: Optional[str]) -> None:
        if not owner:
            return
        with self._sessions() as session:
            session.execute(delete(SavedScenario).where(SavedScenario.owner == owner))
            session.commit()


def create_store_from_env(url: Optional[str], max_per_user: Optional[str] = None) -> ComparisonStore:
    """Build the store from ``EMI_CALC_DATABASE_URL``/``EMI_CALC_MAX_SCENARIOS`` values."""
    return ComparisonStore(
        url or DEFAULT_DATABASE_URL,
        max_per_user=int(max_per_user) if max_per_user else DEFAULT_MAX_PER_USER,
    )
