from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional
import logging

from coursehub.models.activity_model import Activity
from coursehub.models.enums import ActivityType

logger = logging.getLogger(__name__)

def create_activity(db: Session, user_id: int, activity_type: ActivityType, resource_id: int, start_time: datetime) -> Activity:
    """Adds an open activity and flushes to assign its id. Does not commit."""
    activity = Activity(
        user_id=user_id,
        type=activity_type,
        resource_id=resource_id,
        start_time=start_time,
    )
    db.add(activity)
    db.flush()
    return activity

def get_activity(db: Session, activity_id: int) -> Optional[Activity]:
    logger.debug(f"Fetching activity with ID: {activity_id}")
    return db.query(Activity).filter(Activity.id == activity_id).first()

def close_activity_if_open(db: Session, activity_id: int, end_time: datetime) -> bool:
    """
    Sets end_time only while it is still NULL.
    Returns False when another request closed the activity first. Does not commit.
    """
    updated = (
        db.query(Activity)
        .filter(Activity.id == activity_id, Activity.end_time.is_(None))
        .update({Activity.end_time: end_time}, synchronize_session=False)
    )
    return updated == 1

def get_closed_activities_for_user(db: Session, user_id: int) -> List[Activity]:
    return db.query(Activity).filter(Activity.user_id == user_id, Activity.end_time.isnot(None)).all()
