"""
Activity session tracking.

An Activity is OPEN from `start_activity` until a single successful
`end_activity` by its owner closes it; CLOSED is terminal. Sessions that are
never closed stay OPEN and contribute no time.

Opening a second session for the same (user, resource) is allowed. The client
is expected to close one view before opening the next.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coursehub.core.exceptions import (
    ActivityAlreadyClosedError,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from coursehub.crud import activity_crud
from coursehub.models.activity_model import Activity, as_utc
from coursehub.models.enums import ActivityType
from coursehub.services.progress_aggregator import ProgressAggregator

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds from start to end, floored and never negative."""
    return max(0, math.floor((as_utc(end) - as_utc(start)).total_seconds()))


class ActivityTracker:
    def __init__(
        self,
        db: Session,
        aggregator: ProgressAggregator,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.aggregator = aggregator
        self.clock = clock

    def start_activity(self, user_id: int, activity_type: ActivityType, resource_id: int) -> Activity:
        """Opens a session. The resource is not checked here; the aggregator validates it on close."""
        try:
            activity = activity_crud.create_activity(self.db, user_id, activity_type, resource_id, self.clock())
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error starting {activity_type} activity for user {user_id}: {e}", exc_info=True)
            raise StorageError() from e

        self.db.refresh(activity)
        logger.info(f"Activity {activity.id} opened: user {user_id}, {activity_type.value} {resource_id}.")
        return activity

    def end_activity(
        self,
        activity_id: int,
        user_id: int,
        completion_status: Optional[str] = None,
    ) -> Activity:
        """
        Closes an open session owned by `user_id` and, for lessons, aggregates
        the elapsed time in the same transaction.
        """
        activity = activity_crud.get_activity(self.db, activity_id)
        if activity is None:
            logger.warning(f"User {user_id} tried to end unknown activity {activity_id}.")
            raise NotFoundError("Activity not found.")
        if activity.user_id != user_id:
            logger.warning(f"User {user_id} tried to end activity {activity_id} owned by user {activity.user_id}.")
            raise ForbiddenError("Activity belongs to another user.")
        if not activity.is_open:
            logger.warning(f"Activity {activity_id} is already closed.")
            raise ActivityAlreadyClosedError()

        # endTime >= startTime even if the clock stepped backwards
        end_time = max(as_utc(self.clock()), as_utc(activity.start_time))
        time_spent = elapsed_seconds(activity.start_time, end_time)

        try:
            if not activity_crud.close_activity_if_open(self.db, activity_id, end_time):
                # A concurrent close won the race; nothing of ours is written
                self.db.rollback()
                logger.warning(f"Activity {activity_id} was closed concurrently.")
                raise ActivityAlreadyClosedError()

            if activity.type == ActivityType.LESSON:
                self.aggregator.record_lesson_time(user_id, activity.resource_id, time_spent, completion_status)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error ending activity {activity_id} for user {user_id}: {e}", exc_info=True)
            raise StorageError() from e

        self.db.refresh(activity)
        logger.info(f"Activity {activity_id} closed after {time_spent}s ({activity.type.value} {activity.resource_id}).")
        return activity

    def total_tracked_time(self, user_id: int) -> int:
        """Seconds across every closed activity of the user, lessons and quizzes alike."""
        activities = activity_crud.get_closed_activities_for_user(self.db, user_id)
        return sum(activity.time_spent for activity in activities)
