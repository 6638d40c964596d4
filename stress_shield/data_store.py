"""
Persistent profile store, survives uvicorn --reload.

Profiles (finances, smart goals, strategies, optimizations, subsidies) are
written to a JSON file keyed by user name. Goal edits are applied as a
replace of the whole goal list under a lock, so two racing edits can't drop
each other's changes.
"""
import json
import logging
import math
import threading
import time
import uuid
from pathlib import Path
from typing import Optional

from . import config
from .models import Goal, GoalInput, InvalidGoal, UserProfile

logger = logging.getLogger(__name__)


def validate_goal(goal_in: GoalInput) -> None:
    """Reject goals the allocator can't handle."""
    if not goal_in.name or not goal_in.name.strip():
        raise InvalidGoal("Goal name must not be empty.")
    if not math.isfinite(goal_in.target_amount) or goal_in.target_amount <= 0:
        raise InvalidGoal("Goal target amount must be greater than 0.")
    if goal_in.deadline_months <= 0:
        raise InvalidGoal("Goal deadline must be at least 1 month.")


class ProfileStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or config.STORE_PATH)
        self._cache: dict = {}
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self._cache = {}
            return
        try:
            self._cache = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read profile store %s (%s); starting empty", self.path, exc)
            self._cache = {}

    def _flush(self) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._cache, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def save_profile(self, profile: UserProfile) -> None:
        """Persist a UserProfile by name, replacing any previous one."""
        with self._lock:
            self._cache[profile.name] = profile.model_dump(mode="json")
            self._flush()
        logger.info("Saved profile %s", profile.name)

    def get_profile(self, name: str) -> Optional[UserProfile]:
        """Return a UserProfile instance, or None if not found."""
        with self._lock:
            self._load()  # re-read so hot-reloads never see stale data
            raw = self._cache.get(name)
        if raw is None:
            return None
        return UserProfile(**raw)

    def delete_profile(self, name: str) -> None:
        with self._lock:
            self._load()
            if name not in self._cache:
                raise KeyError(name)
            del self._cache[name]
            self._flush()
        logger.info("Deleted profile %s", name)

    def _require(self, name: str) -> UserProfile:
        profile = self.get_profile(name)
        if profile is None:
            raise KeyError(name)
        return profile

    def _replace_goals(self, profile: UserProfile, goals) -> None:
        updated = profile.model_copy(update={"smart_goals": list(goals)})
        self._cache[profile.name] = updated.model_dump(mode="json")
        self._flush()

    def add_goal(self, name: str, goal_in: GoalInput) -> Goal:
        validate_goal(goal_in)
        goal = Goal(
            id=uuid.uuid4().hex,
            name=goal_in.name.strip(),
            target_amount=goal_in.target_amount,
            deadline_months=goal_in.deadline_months,
            category=goal_in.category,
            created_at=int(time.time() * 1000),
        )
        with self._lock:
            profile = self._require(name)
            self._replace_goals(profile, [*profile.smart_goals, goal])
        logger.info("Added goal %s (%s) for %s", goal.id, goal.name, name)
        return goal

    def edit_goal(self, name: str, goal_id: str, goal_in: GoalInput) -> Goal:
        """Replace every editable field of a goal; id and created_at stay."""
        validate_goal(goal_in)
        with self._lock:
            profile = self._require(name)
            edited = None
            goals = []
            for g in profile.smart_goals:
                if g.id == goal_id:
                    edited = g.model_copy(update={
                        "name": goal_in.name.strip(),
                        "target_amount": goal_in.target_amount,
                        "deadline_months": goal_in.deadline_months,
                        "category": goal_in.category,
                    })
                    g = edited
                goals.append(g)
            if edited is None:
                raise KeyError(goal_id)
            self._replace_goals(profile, goals)
        logger.info("Edited goal %s for %s", goal_id, name)
        return edited

    def delete_goal(self, name: str, goal_id: str) -> None:
        with self._lock:
            profile = self._require(name)
            goals = [g for g in profile.smart_goals if g.id != goal_id]
            if len(goals) == len(profile.smart_goals):
                raise KeyError(goal_id)
            self._replace_goals(profile, goals)
        logger.info("Deleted goal %s for %s", goal_id, name)


_store: Optional[ProfileStore] = None
_store_lock = threading.Lock()


def get_store() -> ProfileStore:
    """Process-wide store, created on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = ProfileStore()
    return _store
