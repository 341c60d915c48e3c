from workout_ai.models.user import User
from workout_ai.models.user_profile import UserProfileRecord
from workout_ai.models.workout_plan import WorkoutPlanRecord
from workout_ai.models.workout_session import WorkoutSession
from workout_ai.models.progress_metric import ProgressMetric

__all__ = [
    "User",
    "UserProfileRecord",
    "WorkoutPlanRecord",
    "WorkoutSession",
    "ProgressMetric",
]
