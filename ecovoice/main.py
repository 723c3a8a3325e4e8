# ecovoice/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import crud, dashboard, estimator, schemas, tips
from .activity_log import FORM_BUILDERS, ActivityLog
from .config import DATA_DIR, configure_logging
from .database import Base, SessionLocal, engine
from .errors import EcoVoiceError, FormValidationError
from .goals import WeeklyGoal
from .storage import JsonFileStore, KeyValueStore
from .voice import EXAMPLE_PHRASES, VoiceAssistant

logger = logging.getLogger(__name__)


class LocalState:
    """Activity log and weekly goal sharing one key-value store, loaded on first use."""

    def __init__(self, store: KeyValueStore):
        self.log = ActivityLog(store)
        self.goal = WeeklyGoal(store)
        self._loaded = False

    def load(self):
        if not self._loaded:
            self.log.load_all()
            self.goal.load()
            self._loaded = True
        return self


local_state = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        crud.seed_challenges(db)
    yield


app = FastAPI(title="EcoVoice Carbon Footprint API", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(EcoVoiceError)
async def ecovoice_error_handler(request: Request, exc: EcoVoiceError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"notice": exc.notice.model_dump()})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first["loc"] if p != "body")
    err = FormValidationError(f"Invalid value for {field}: {first['msg']}.")
    return await ecovoice_error_handler(request, err)


# Dependencies
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_local_state() -> LocalState:
    global local_state
    if local_state is None:
        local_state = LocalState(JsonFileStore(DATA_DIR))
    return local_state.load()


# -----------------
# Estimator
# -----------------
@app.get("/factors")
def factors():
    return estimator.factor_tables()


@app.post("/estimate", response_model=schemas.EstimateOut)
def estimate(payload: schemas.EstimateIn):
    factor = estimator.lookup_factor(payload.category, payload.subtype, payload.secondary_key)
    co2 = estimator.estimate(payload.category, payload.subtype, payload.quantity, payload.secondary_key)
    return {"category": payload.category, "subtype": payload.subtype, "quantity": payload.quantity,
            "factor": factor, "co2_kg": co2}


# -----------------
# Activity log & dashboard
# -----------------
@app.get("/activities", response_model=List[schemas.ActivityRecord])
def list_activities(state: LocalState = Depends(get_local_state)):
    return list(state.log.records)


@app.post("/activities/{category}", response_model=schemas.ActivityLogged)
def log_activity(category: schemas.Category, payload: Dict[str, Any] = Body(...),
                 state: LocalState = Depends(get_local_state)):
    form_cls, build = FORM_BUILDERS[category]
    try:
        form = form_cls.model_validate(payload)
    except ValidationError as exc:
        field = ".".join(str(p) for p in exc.errors()[0]["loc"])
        raise FormValidationError(f"Invalid value for {field}.", title=f"Please fill all {category.value} fields") from exc
    record = build(form)
    state.log.append(record)
    return {
        "record": record,
        "notice": tips.logged_notice(record),
        "tip": tips.encouragement_for(record),
        "summary": dashboard.summarize(state.log, state.goal.value),
    }


@app.get("/dashboard", response_model=schemas.DashboardSummary)
def get_dashboard(state: LocalState = Depends(get_local_state)):
    return dashboard.summarize(state.log, state.goal.value)


@app.get("/goal", response_model=schemas.GoalOut)
def get_goal(state: LocalState = Depends(get_local_state)):
    return {"value": state.goal.value}


@app.put("/goal", response_model=schemas.GoalOut)
def update_goal(payload: schemas.GoalIn, state: LocalState = Depends(get_local_state)):
    return {"value": state.goal.update(payload.value)}


# -----------------
# Voice
# -----------------
@app.post("/voice", response_model=schemas.VoiceOut)
def voice_command(payload: schemas.VoiceIn, state: LocalState = Depends(get_local_state)):
    """Interpret a final transcript produced by the browser's speech recognition."""
    notices = []
    assistant = VoiceAssistant(on_activity=state.log.append, on_notice=notices.append)
    outcome = assistant.process(payload.transcript)
    return {"response": outcome.response, "activity": outcome.record, "notice": notices[-1] if notices else None}


@app.get("/voice/examples", response_model=List[str])
def voice_examples():
    return list(EXAMPLE_PHRASES)


# -----------------
# Profiles, challenges, leaderboard
# -----------------
@app.post("/profiles", response_model=schemas.ProfileOut)
def create_profile(payload: schemas.ProfileIn, db: Session = Depends(get_db)):
    return crud.create_profile(db, payload.username)


@app.get("/profiles/{user_id}", response_model=schemas.ProfileOut)
def get_profile(user_id: str, db: Session = Depends(get_db)):
    return crud.get_profile(db, user_id)


@app.get("/challenges", response_model=List[schemas.ChallengeOut])
def list_challenges(user_id: str = None, db: Session = Depends(get_db)):
    progress = {}
    if user_id:
        progress = {uc.challenge_id: uc for uc in crud.get_user_challenges(db, user_id)}
    out = []
    for c in crud.list_challenges(db):
        out.append({"id": c.id, "title": c.title, "description": c.description or "", "difficulty": c.difficulty,
                    "points": c.points, "category": c.category,
                    "status": crud.challenge_status(progress.get(c.id))})
    return out


@app.post("/challenges/{challenge_id}/start")
def start_challenge(challenge_id: str, payload: schemas.ChallengeAction, db: Session = Depends(get_db)):
    crud.start_challenge(db, payload.user_id, challenge_id)
    return {"status": "in_progress",
            "notice": schemas.Notice(title="Challenge Started!", description="Good luck on your eco-journey!")}


@app.post("/challenges/{challenge_id}/complete")
def complete_challenge(challenge_id: str, payload: schemas.ChallengeAction, db: Session = Depends(get_db)):
    uc = crud.complete_challenge(db, payload.user_id, challenge_id)
    return {"status": "completed", "total_points": uc.profile.total_points,
            "notice": schemas.Notice(title="Challenge Completed!", description="Points added to your account!")}


@app.get("/leaderboard", response_model=List[schemas.LeaderboardRow])
def get_leaderboard(db: Session = Depends(get_db)):
    return crud.leaderboard(db)


# -----------------
# Business inquiries
# -----------------
@app.post("/inquiries", response_model=schemas.InquiryOut)
def create_inquiry(payload: schemas.InquiryIn, db: Session = Depends(get_db)):
    inquiry = crud.create_inquiry(db, payload.company_name, payload.contact_name, payload.email,
                                  payload.phone, payload.message)
    return {"inquiry_id": inquiry.id,
            "notice": schemas.Notice(title="Inquiry Submitted!", description="Our team will contact you shortly.")}


def run():
    import uvicorn

    configure_logging()
    uvicorn.run("ecovoice.main:app", host="0.0.0.0", port=8000)
