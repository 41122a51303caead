import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from api.auth import AuthPrincipal, require_athlete, require_coach
from api.deps import get_db
from api.ratelimit import limiter, write_limit
from api.schemas import (
    AssignmentResponse,
    AssignResponse,
    AthleteAssignmentItem,
    AthleteWorkoutResponse,
    CoachAssignmentItem,
    CoachLogResponse,
    CustomWorkoutSummary,
    ErrorResponse,
    HealthResponse,
    RecurringCreatedResponse,
    RecurringListItem,
    RecurringResponse,
    TemplateSummary,
    WorkoutDetailResponse,
    WorkoutLogResponse,
)
from core.db import get_query_stats
from core.models import AssignmentStatus
from core.observability import system_status
from core.services import assignment_views, recurring, workout_logging, workout_sources
from core.services.assignments import AssignmentTarget, assign
from core.services.workout_logging import HeartRateSummary
from core.services.workout_sources import SourceRef
from core.validators import AssignInput, CustomWorkoutInput, RecurringAssignInput, SaveProgressInput

logger = logging.getLogger(__name__)
ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
}
router = APIRouter(prefix="/api/v1", responses=ERROR_RESPONSES)

DbSession = Annotated[Session, Depends(get_db)]
Coach = Annotated[AuthPrincipal, Depends(require_coach)]
Athlete = Annotated[AuthPrincipal, Depends(require_athlete)]


@router.get("/health", response_model=HealthResponse, tags=["ops"])
def health():
    stats = get_query_stats()
    strip = system_status(stats)
    return HealthResponse(
        status=strip.status,
        message=strip.message,
        queries=stats.total,
        slow_queries=stats.slow,
        p95_ms=stats.p95_ms,
    )


# -- Templates --


@router.get("/templates", response_model=list[TemplateSummary], tags=["templates"])
def list_templates(
    coach: Coach,
    s: DbSession,
    difficulty: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
):
    return workout_sources.list_templates(s, difficulty=difficulty, tag=tag, search=search)


@router.get("/templates/{template_id}", response_model=WorkoutDetailResponse, tags=["templates"])
def get_template(template_id: int, coach: Coach, s: DbSession):
    return workout_sources.get_source(s, SourceRef.template(template_id))


@router.post(
    "/templates/{template_id}/clone",
    response_model=WorkoutDetailResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["templates"],
)
@limiter.limit(write_limit)
def clone_template(request: Request, template_id: int, coach: Coach, s: DbSession):
    workout = workout_sources.clone_template(s, template_id, coach.user_id)
    return workout_sources.get_source(s, SourceRef.custom(workout.id))


# -- Custom workouts --


@router.get("/custom-workouts", response_model=list[CustomWorkoutSummary], tags=["custom-workouts"])
def list_custom_workouts(coach: Coach, s: DbSession):
    return workout_sources.list_custom_workouts(s, coach.user_id)


@router.post(
    "/custom-workouts",
    response_model=WorkoutDetailResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["custom-workouts"],
)
@limiter.limit(write_limit)
def create_custom_workout(request: Request, payload: CustomWorkoutInput, coach: Coach, s: DbSession):
    workout = workout_sources.create_custom_workout(s, coach.user_id, payload)
    return workout_sources.get_custom_workout(s, workout.id, coach.user_id)


@router.get("/custom-workouts/{workout_id}", response_model=WorkoutDetailResponse, tags=["custom-workouts"])
def get_custom_workout(workout_id: int, coach: Coach, s: DbSession):
    return workout_sources.get_custom_workout(s, workout_id, coach.user_id)


@router.put("/custom-workouts/{workout_id}", response_model=WorkoutDetailResponse, tags=["custom-workouts"])
@limiter.limit(write_limit)
def update_custom_workout(request: Request, workout_id: int, payload: CustomWorkoutInput, coach: Coach, s: DbSession):
    workout_sources.update_custom_workout(s, workout_id, coach.user_id, payload)
    return workout_sources.get_custom_workout(s, workout_id, coach.user_id)


@router.delete("/custom-workouts/{workout_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["custom-workouts"])
@limiter.limit(write_limit)
def delete_custom_workout(request: Request, workout_id: int, coach: Coach, s: DbSession):
    workout_sources.delete_custom_workout(s, workout_id, coach.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- Coach: assignments --


@router.get("/coach/assignments", response_model=list[CoachAssignmentItem], tags=["coach"])
def coach_assignments(coach: Coach, s: DbSession, status_filter: Optional[AssignmentStatus] = Query(None, alias="status")):
    rows = assignment_views.list_for_coach(s, coach.user_id, status=status_filter.value if status_filter else None)
    return [CoachAssignmentItem.model_validate(r, from_attributes=True) for r in rows]


@router.post(
    "/coach/assignments",
    response_model=AssignResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["coach"],
)
@limiter.limit(write_limit)
def create_assignments(request: Request, payload: AssignInput, coach: Coach, s: DbSession):
    target = AssignmentTarget.build(athlete_ids=payload.athlete_ids, group_id=payload.group_id)
    ref = SourceRef.parse(payload.source_type, payload.source_id)
    rows = assign(s, coach.user_id, ref, payload.scheduled_date, target)
    return AssignResponse(
        count=len(rows),
        assignments=[AssignmentResponse.model_validate(r) for r in rows],
    )


@router.get("/coach/assignments/{assignment_id}/log", response_model=CoachLogResponse, tags=["coach"])
def coach_assignment_log(assignment_id: int, coach: Coach, s: DbSession):
    assignment, log = workout_logging.get_log_for_coach(s, assignment_id, coach.user_id)
    return CoachLogResponse(
        assignment=AssignmentResponse.model_validate(assignment),
        log=WorkoutLogResponse.model_validate(log) if log is not None else None,
    )


# -- Coach: recurring assignments --


@router.get("/coach/recurring-assignments", response_model=list[RecurringListItem], tags=["coach"])
def list_recurring(coach: Coach, s: DbSession, active: Optional[bool] = Query(None)):
    items = []
    for view in recurring.list_recurring(s, coach.user_id, active=active):
        base = RecurringResponse.model_validate(view.recurring).model_dump()
        items.append(
            RecurringListItem(
                **base,
                workout_title=view.workout_title,
                days_label=recurring.describe_days(view.recurring.days_of_week),
            )
        )
    return items


@router.post(
    "/coach/recurring-assignments",
    response_model=RecurringCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["coach"],
)
@limiter.limit(write_limit)
def create_recurring(request: Request, payload: RecurringAssignInput, coach: Coach, s: DbSession):
    target = AssignmentTarget.build(athlete_ids=payload.athlete_ids, group_id=payload.group_id)
    ref = SourceRef.parse(payload.source_type, payload.source_id)
    result = recurring.create_recurring(
        s,
        coach.user_id,
        ref,
        target,
        payload.days_of_week,
        payload.start_date,
        payload.end_date,
        frequency=payload.frequency,
    )
    return RecurringCreatedResponse(
        recurring=RecurringResponse.model_validate(result.recurring),
        count=len(result.created),
        assignments=[AssignmentResponse.model_validate(r) for r in result.created],
    )


@router.patch("/coach/recurring-assignments/{recurring_id}/stop", response_model=RecurringResponse, tags=["coach"])
@limiter.limit(write_limit)
def stop_recurring(request: Request, recurring_id: int, coach: Coach, s: DbSession):
    return recurring.stop_recurring(s, recurring_id, coach.user_id)


# -- Athlete --


@router.get("/athlete/workouts", response_model=list[AthleteAssignmentItem], tags=["athlete"])
def athlete_workouts(athlete: Athlete, s: DbSession, status_filter: Optional[AssignmentStatus] = Query(None, alias="status")):
    rows = assignment_views.list_for_athlete(s, athlete.user_id, status=status_filter.value if status_filter else None)
    return [AthleteAssignmentItem.model_validate(r, from_attributes=True) for r in rows]


@router.get("/athlete/workouts/{assignment_id}", response_model=AthleteWorkoutResponse, tags=["athlete"])
def athlete_workout(assignment_id: int, athlete: Athlete, s: DbSession):
    view = assignment_views.get_athlete_workout(s, assignment_id, athlete.user_id)
    return AthleteWorkoutResponse(
        assignment=AthleteAssignmentItem.model_validate(view.assignment, from_attributes=True),
        workout=WorkoutDetailResponse.model_validate(view.workout) if view.workout is not None else None,
        log=WorkoutLogResponse.model_validate(view.log) if view.log is not None else None,
    )


@router.post("/athlete/workouts/{assignment_id}/log", response_model=WorkoutLogResponse, tags=["athlete"])
@limiter.limit(write_limit)
def save_workout_log(request: Request, assignment_id: int, payload: SaveProgressInput, athlete: Athlete, s: DbSession):
    heart_rate = HeartRateSummary(**payload.heart_rate.model_dump()) if payload.heart_rate is not None else None
    return workout_logging.save_progress(
        s,
        assignment_id,
        athlete.user_id,
        payload.overall_notes,
        payload.sets,
        heart_rate=heart_rate,
    )


@router.post("/athlete/workouts/{assignment_id}/complete", response_model=AssignmentResponse, tags=["athlete"])
@limiter.limit(write_limit)
def complete_workout(request: Request, assignment_id: int, athlete: Athlete, s: DbSession):
    return workout_logging.complete(s, assignment_id, athlete.user_id)
