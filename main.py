import json
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import ReturnDocument
from pymongo.database import Database

import database
from aggregation import expenses_for_category_in_timeframe, summarize_timeframe
from database import (
    EXPENSES, INCOME, SAVINGS_GOALS, USERS,
    create_document, ensure_indexes, get_documents, serialize_doc, to_object_id,
)
from income import normalize_income
from projection import apply_goal_progress, goal_pacing, interest_schedule, project_interest
from schemas import (
    Expense, ExpenseUpdate, GoalPacingOut, GoalProgress, Income, IncomeOut, IncomeUpdate,
    InterestProjectionOut, InterestRequest, SavingsGoal, SavingsGoalUpdate,
    TimeframeSummaryOut, UserProfile, UserProfileUpdate,
)
from timeframes import Timeframe

load_dotenv()

# Environment
PORT = int(os.getenv("PORT", 5000))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("prospera")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if database.db is not None:
        ensure_indexes(database.db)
        logger.info("MongoDB connected: %s", database.db.name)
    else:
        logger.warning("DATABASE_URL not set; data endpoints will fail")
    yield


# FastAPI app
app = FastAPI(title="Prospera API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed)
    return response


# Helpers
def get_db() -> Database:
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return database.db


def short_token(token: Optional[str]) -> str:
    return f"{token[:8]}..." if token else "-"


async def extract_token(request: Request, authorization: Optional[str], query_token: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    if query_token:
        return query_token
    body = await request.body()
    if body:
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        if isinstance(payload, dict) and payload.get("userToken"):
            return str(payload["userToken"])
    return None


async def require_user_token(
    request: Request,
    authorization: Optional[str] = Header(None),
    user_token: Optional[str] = Query(None, alias="userToken"),
) -> str:
    """Per-installation token from the bearer header, query string or body.

    Tokens are opaque and are not checked against stored users.
    """
    token = await extract_token(request, authorization, user_token)
    if not token:
        raise HTTPException(status_code=400, detail="userToken required")
    return token


def owned(doc_id: str, token: str) -> Optional[dict]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return {"_id": oid, "user_token": token}


def update_owned(db: Database, collection: str, doc_id: str, token: str, updates: dict) -> Optional[dict]:
    query = owned(doc_id, token)
    if query is None:
        return None
    updates = {k: v for k, v in updates.items() if k != "user_token"}
    updates["updated_at"] = datetime.now(timezone.utc)
    doc = db[collection].find_one_and_update(query, {"$set": updates}, return_document=ReturnDocument.AFTER)
    return serialize_doc(doc)


def changes_from(update, nullable=frozenset()) -> dict:
    return {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None or k in nullable}


def delete_owned(db: Database, collection: str, doc_id: str, token: str) -> bool:
    query = owned(doc_id, token)
    if query is None:
        return False
    return db[collection].find_one_and_delete(query) is not None


# Public endpoints
@app.get("/")
def root():
    return {"message": "Prospera API is running"}


@app.get("/api/health")
def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


# User endpoints
@app.post("/api/users/token")
async def issue_token(request: Request):
    body = await request.body()
    provided = None
    if body:
        try:
            provided = json.loads(body).get("userToken")
        except (ValueError, AttributeError):
            provided = None
    if provided:
        return {"userToken": provided}
    token = str(uuid.uuid4())
    logger.info("issued token %s", short_token(token))
    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"userToken": token})


NULLABLE_PROFILE_FIELDS = {"profile_photo", "monthly_budget"}


def _profile(doc: dict) -> UserProfile:
    defaults = UserProfile().model_dump()
    return UserProfile(**{k: doc.get(k, v) for k, v in defaults.items()})


@app.get("/api/users/profile", response_model=UserProfile)
def get_profile(token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    user = db[USERS].find_one({"user_token": token})
    if user is None:
        user = {"user_token": token, **UserProfile().model_dump(), "created_at": datetime.now(timezone.utc)}
        db[USERS].insert_one(user)
    return _profile(user)


@app.put("/api/users/profile", response_model=UserProfile)
def update_profile(update: UserProfileUpdate, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    changes = changes_from(update, NULLABLE_PROFILE_FIELDS)
    defaults = {k: v for k, v in UserProfile().model_dump().items() if k not in changes}
    defaults["created_at"] = datetime.now(timezone.utc)
    user = db[USERS].find_one_and_update(
        {"user_token": token},
        {"$set": changes, "$setOnInsert": defaults} if changes else {"$setOnInsert": defaults},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info("[user] PUT profile %s fields=%s", short_token(token), sorted(changes))
    return _profile(user)


# Expense endpoints
@app.post("/api/expenses", status_code=status.HTTP_201_CREATED)
def create_expense(expense: Expense, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    logger.info("[expense] POST %s amount=%s category=%s", short_token(token), expense.amount, expense.category)
    data = expense.model_dump()
    data["user_token"] = token
    return create_document(db, EXPENSES, data)


@app.get("/api/expenses")
def list_expenses(token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    return get_documents(db, EXPENSES, {"user_token": token})


@app.get("/api/expenses/summary", response_model=TimeframeSummaryOut)
def expense_summary(timeframe: Timeframe = Timeframe.MONTH, token: str = Depends(require_user_token),
                    db: Database = Depends(get_db)):
    expenses = get_documents(db, EXPENSES, {"user_token": token})
    return asdict(summarize_timeframe(expenses, timeframe))


@app.get("/api/expenses/category/{category}")
def expenses_for_category(category: str, timeframe: Timeframe = Timeframe.MONTH,
                          token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    expenses = get_documents(db, EXPENSES, {"user_token": token})
    return expenses_for_category_in_timeframe(expenses, timeframe, category)


@app.put("/api/expenses/{expense_id}")
def update_expense(expense_id: str, update: ExpenseUpdate, token: str = Depends(require_user_token),
                   db: Database = Depends(get_db)):
    logger.info("[expense] PUT %s user %s", expense_id, short_token(token))
    doc = update_owned(db, EXPENSES, expense_id, token, changes_from(update, {"color"}))
    if doc is None:
        raise HTTPException(status_code=404, detail="Expense not found")
    return doc


@app.delete("/api/expenses/{expense_id}")
def delete_expense(expense_id: str, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    logger.info("[expense] DELETE %s user %s", expense_id, short_token(token))
    if not delete_owned(db, EXPENSES, expense_id, token):
        raise HTTPException(status_code=404, detail="Expense not found")
    return {"message": "Expense deleted"}


# Income endpoints
@app.post("/api/income", status_code=status.HTTP_201_CREATED)
def create_income(income: Income, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    logger.info("[income] POST %s name=%s", short_token(token), income.name)
    data = income.model_dump()
    data["user_token"] = token
    return create_document(db, INCOME, data)


@app.get("/api/income")
def list_income(token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    return get_documents(db, INCOME, {"user_token": token})


@app.get("/api/income/normalized", response_model=List[IncomeOut])
def normalized_income(token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    return normalize_income(get_documents(db, INCOME, {"user_token": token}))


@app.put("/api/income/{income_id}")
def update_income(income_id: str, update: IncomeUpdate, token: str = Depends(require_user_token),
                  db: Database = Depends(get_db)):
    logger.info("[income] PUT %s user %s", income_id, short_token(token))
    doc = update_owned(db, INCOME, income_id, token, changes_from(update))
    if doc is None:
        raise HTTPException(status_code=404, detail="Income not found")
    return doc


@app.delete("/api/income/{income_id}")
def delete_income(income_id: str, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    logger.info("[income] DELETE %s user %s", income_id, short_token(token))
    if not delete_owned(db, INCOME, income_id, token):
        raise HTTPException(status_code=404, detail="Income not found")
    return {"message": "Income deleted"}


# Savings goals
@app.get("/api/savings-goals")
def list_goals(token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    return get_documents(db, SAVINGS_GOALS, {"user_token": token})


@app.post("/api/savings-goals", status_code=status.HTTP_201_CREATED)
def create_goal(goal: SavingsGoal, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    data = goal.model_dump()
    data["user_token"] = token
    data["completed_at"] = None
    return create_document(db, SAVINGS_GOALS, data)


@app.put("/api/savings-goals/{goal_id}")
def update_goal(goal_id: str, update: SavingsGoalUpdate, token: str = Depends(require_user_token),
                db: Database = Depends(get_db)):
    doc = update_owned(db, SAVINGS_GOALS, goal_id, token, changes_from(update, {"color"}))
    if doc is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return doc


@app.patch("/api/savings-goals/{goal_id}/progress")
def update_goal_progress(goal_id: str, progress: GoalProgress, token: str = Depends(require_user_token),
                         db: Database = Depends(get_db)):
    query = owned(goal_id, token)
    goal = db[SAVINGS_GOALS].find_one(query) if query else None
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    updated = apply_goal_progress(goal, progress.current_amount)
    changes = {"current_amount": updated["current_amount"], "completed_at": updated.get("completed_at")}
    return update_owned(db, SAVINGS_GOALS, goal_id, token, changes)


@app.get("/api/savings-goals/{goal_id}/pacing", response_model=GoalPacingOut)
def goal_pacing_status(goal_id: str, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    query = owned(goal_id, token)
    goal = db[SAVINGS_GOALS].find_one(query) if query else None
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    pacing = goal_pacing(serialize_doc(goal))
    result = asdict(pacing)
    result["status"] = pacing.status.value if pacing.status else None
    return result


@app.delete("/api/savings-goals/{goal_id}")
def delete_goal(goal_id: str, token: str = Depends(require_user_token), db: Database = Depends(get_db)):
    if not delete_owned(db, SAVINGS_GOALS, goal_id, token):
        raise HTTPException(status_code=404, detail="Goal not found")
    return {"message": "Goal deleted", "id": goal_id}


# Calculators
@app.post("/api/interest/projection")
def interest_projection(req: InterestRequest):
    args = req.model_dump()
    projection = project_interest(**args)
    if projection is None:
        return {"projection": None, "schedule": []}
    out = asdict(projection)
    out["interest_type"] = projection.interest_type.value
    schedule = interest_schedule(req.principal, req.annual_rate, req.duration, req.time_unit, req.frequency)
    return {
        "projection": InterestProjectionOut(**out).model_dump(),
        "schedule": [asdict(point) for point in schedule],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
