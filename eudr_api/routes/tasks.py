"""
/api/tasks -- Compliance to-dos.

Completing a task (PUT with completed=true) writes a "task completed"
activity. Other edits do not touch the activity log.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from eudr_api import config
from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import Task, TaskCreate, TaskUpdate
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("", response_model=list[Task], summary="My tasks")
async def my_tasks(storage: StorageDep, user: CurrentUser) -> list[Task]:
    return storage.list_tasks_by_assignee(user.id)


@router.get(
    "/upcoming",
    response_model=list[Task],
    summary="Upcoming tasks",
    description="Open tasks by due date, soonest first; tasks without a due date come last.",
)
async def upcoming_tasks(
    storage: StorageDep,
    user: CurrentUser,
    limit: int = Query(default=config.DASHBOARD_LIST_LIMIT, ge=1, le=100),
) -> list[Task]:
    return storage.list_upcoming_tasks(limit)


@router.get("/{task_id}", response_model=Task, summary="Get a task")
async def get_task(task_id: int, storage: StorageDep, user: CurrentUser) -> Task:
    task = storage.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.post("", response_model=Task, status_code=201, summary="Create a task")
async def create_task(body: TaskCreate, storage: StorageDep, user: CurrentUser) -> Task:
    task = storage.create_task(body)
    logger.info("Task %d assigned to user %d", task.id, task.assigned_to)

    record_activity(
        storage, user,
        type="task",
        description=f'New task "{task.title}" was created',
        entity_type="task",
        entity_id=task.id,
    )
    return task


@router.put("/{task_id}", response_model=Task, summary="Update or complete a task")
async def update_task(
    task_id: int, body: TaskUpdate, storage: StorageDep, user: CurrentUser,
) -> Task:
    task = storage.update_task(task_id, body)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    if body.completed and task.completed:
        record_activity(
            storage, user,
            type="task",
            description=f'Task "{task.title}" was completed',
            entity_type="task",
            entity_id=task.id,
        )
    return task
