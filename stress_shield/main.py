import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .allocation import allocate, analyze_goals
from .data_store import ProfileStore, get_store
from .logging_config import setup_logging
from .models import FinancialSnapshot, GoalInput, InvalidGoal, UserProfile
from .scoring import stress_score

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=config.APP_TITLE)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _profile_or_404(store: ProfileStore, name: str) -> UserProfile:
    profile = store.get_profile(name)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@app.post("/score")
def score_snapshot(snapshot: FinancialSnapshot):
    return stress_score(snapshot)


@app.post("/onboard/")
def onboard_user(profile: UserProfile, store: ProfileStore = Depends(get_store)):
    store.save_profile(profile)
    return {"message": f"Onboarding complete for {profile.name}", "data": profile}


@app.get("/user/{name}")
def get_user_data(name: str, store: ProfileStore = Depends(get_store)):
    return _profile_or_404(store, name)


@app.get("/score/{name}")
def get_score(name: str, store: ProfileStore = Depends(get_store)):
    profile = _profile_or_404(store, name)
    return stress_score(profile.finances)


@app.get("/goals/{name}")
def list_goals(name: str, store: ProfileStore = Depends(get_store)):
    profile = _profile_or_404(store, name)
    analyses = analyze_goals(profile.finances, profile.smart_goals, profile.strategies)
    return [
        {"goal": goal, "analysis": analysis}
        for goal, analysis in zip(profile.smart_goals, analyses)
    ]


@app.post("/goals/{name}")
def add_goal(name: str, goal_in: GoalInput, store: ProfileStore = Depends(get_store)):
    try:
        return store.add_goal(name, goal_in)
    except InvalidGoal as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except KeyError:
        raise HTTPException(status_code=404, detail="User not found")


@app.put("/goals/{name}/{goal_id}")
def edit_goal(name: str, goal_id: str, goal_in: GoalInput,
              store: ProfileStore = Depends(get_store)):
    _profile_or_404(store, name)
    try:
        return store.edit_goal(name, goal_id, goal_in)
    except InvalidGoal as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except KeyError:
        raise HTTPException(status_code=404, detail="Goal not found")


@app.delete("/goals/{name}/{goal_id}")
def delete_goal(name: str, goal_id: str, store: ProfileStore = Depends(get_store)):
    _profile_or_404(store, name)
    try:
        store.delete_goal(name, goal_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Goal not found")
    return {"message": f"Goal {goal_id} deleted"}


@app.get("/allocation/{name}")
def get_allocation(name: str, store: ProfileStore = Depends(get_store)):
    profile = _profile_or_404(store, name)
    subsidy_total = sum(s.monthly_benefit for s in profile.claimed_subsidies)
    buckets = allocate(
        profile.finances,
        goals=profile.smart_goals,
        strategies=profile.strategies,
        optimizations=profile.lifestyle_optimizations,
        subsidies_enabled=profile.subsidies_enabled,
        claimed_subsidies_total=subsidy_total,
    )
    return {
        "income": profile.finances.income,
        "buckets": buckets,
        "total": sum(b.amount for b in buckets),
    }


@app.get("/analysis/{name}")
def get_analysis(name: str, store: ProfileStore = Depends(get_store)):
    profile = _profile_or_404(store, name)
    return {
        "financials": {"stress": stress_score(profile.finances)},
        "subsidies": {
            "matches": len(profile.claimed_subsidies),
            "monthly_total": sum(s.monthly_benefit for s in profile.claimed_subsidies),
        },
    }
