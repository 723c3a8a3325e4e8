# ecovoice/crud.py
import functools
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import ConflictError, NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

LEADERBOARD_LIMIT = 100

DEFAULT_CHALLENGES = [
    {"title": "Car-Free Day", "description": "Walk, cycle or take public transport for a whole day.",
     "difficulty": "easy", "points": 50, "category": "transport"},
    {"title": "Meatless Week", "description": "Eat only vegetarian or vegan meals for seven days.",
     "difficulty": "hard", "points": 200, "category": "food"},
    {"title": "Unplug Evening", "description": "Switch off non-essential electronics for an evening.",
     "difficulty": "easy", "points": 30, "category": "energy"},
    {"title": "Lights Out Hour", "description": "Spend an hour at home without any lights on.",
     "difficulty": "easy", "points": 20, "category": "energy"},
    {"title": "Zero-Waste Weekend", "description": "Produce no landfill waste for a full weekend.",
     "difficulty": "hard", "points": 150, "category": "waste"},
    {"title": "Commute by Bike", "description": "Cycle to work or school three times this week.",
     "difficulty": "medium", "points": 100, "category": "transport"},
    {"title": "Plastic-Free Shopping", "description": "Do a full grocery run without single-use plastic.",
     "difficulty": "medium", "points": 80, "category": "waste"},
]


def persisting(fn):
    """Roll back and raise PersistenceError on database failures."""
    @functools.wraps(fn)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return fn(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("database call %s failed", fn.__name__)
            raise PersistenceError("The database is unavailable. Please try again.") from exc
    return wrapper


# Profiles
@persisting
def create_profile(db: Session, username):
    profile = models.Profile(username=username.strip(), total_points=0)
    db.add(profile); db.commit(); db.refresh(profile)
    logger.info("created profile %s (%s)", profile.id, profile.username)
    return profile


@persisting
def get_profile(db: Session, user_id):
    profile = db.get(models.Profile, user_id)
    if not profile:
        raise NotFoundError(f"No profile with id {user_id}.", title="Profile not found")
    return profile


# Challenges
@persisting
def seed_challenges(db: Session, challenges=None):
    if db.query(models.Challenge).count():
        return 0
    rows = [models.Challenge(**c) for c in (challenges or DEFAULT_CHALLENGES)]
    db.add_all(rows); db.commit()
    logger.info("seeded %d challenges", len(rows))
    return len(rows)


@persisting
def list_challenges(db: Session):
    return db.query(models.Challenge).order_by(models.Challenge.points.asc(), models.Challenge.title.asc()).all()


@persisting
def get_user_challenges(db: Session, user_id):
    return db.query(models.UserChallenge).filter(models.UserChallenge.user_id == user_id).all()


def challenge_status(user_challenge):
    if user_challenge is None:
        return "not_started"
    return "completed" if user_challenge.completed else "in_progress"


@persisting
def start_challenge(db: Session, user_id, challenge_id):
    get_profile(db, user_id)
    if not db.get(models.Challenge, challenge_id):
        raise NotFoundError(f"No challenge with id {challenge_id}.", title="Challenge not found")
    uc = models.UserChallenge(user_id=user_id, challenge_id=challenge_id)
    db.add(uc)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("You have already started this challenge.", title="Challenge already started") from exc
    db.refresh(uc)
    logger.info("%s started challenge %s", user_id, challenge_id)
    return uc


@persisting
def complete_challenge(db: Session, user_id, challenge_id):
    """Mark a started challenge complete and award its points once."""
    uc = (
        db.query(models.UserChallenge)
        .filter(models.UserChallenge.user_id == user_id, models.UserChallenge.challenge_id == challenge_id)
        .first()
    )
    if not uc:
        raise NotFoundError("Start the challenge before completing it.", title="Challenge not started")
    if uc.completed:
        return uc
    uc.completed = True
    uc.completed_at = models.utcnow()
    uc.profile.total_points += uc.challenge.points
    db.commit(); db.refresh(uc)
    logger.info("%s completed challenge %s (+%d points)", user_id, challenge_id, uc.challenge.points)
    return uc


# Leaderboard
@persisting
def leaderboard(db: Session, limit=LEADERBOARD_LIMIT):
    rows = (
        db.query(models.Profile)
        .order_by(models.Profile.total_points.desc(), models.Profile.created_at.asc())
        .limit(limit)
        .all()
    )
    return [
        {"rank": i, "user_id": p.id, "username": p.username or "Anonymous", "total_points": p.total_points}
        for i, p in enumerate(rows, start=1)
    ]


# Business inquiries
@persisting
def create_inquiry(db: Session, company_name, contact_name, email, phone, message):
    inquiry = models.BusinessInquiry(
        company_name=company_name, contact_name=contact_name, email=email, phone=phone, message=message,
    )
    db.add(inquiry); db.commit(); db.refresh(inquiry)
    logger.info("business inquiry %s from %s", inquiry.id, company_name)
    return inquiry
