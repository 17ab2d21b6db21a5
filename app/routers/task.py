from fastapi import APIRouter, Depends, status

from app.db.store import RecordStore
from app.dependencies.auth import get_current_user, get_store
from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.services.credentials import Identity
from app.services.task_repository import TaskRepository

router = APIRouter(prefix="/api/todos", tags=["Todos"])


def get_task_repository(store: RecordStore = Depends(get_store)) -> TaskRepository:
    return TaskRepository(store)


@router.get("", response_model=list[TaskRead])
def list_tasks(
    repo: TaskRepository = Depends(get_task_repository),
    user: Identity = Depends(get_current_user),
):
    return repo.list(user.user_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    body: TaskCreate,
    repo: TaskRepository = Depends(get_task_repository),
    user: Identity = Depends(get_current_user),
):
    return repo.create(
        user.user_id,
        body.text,
        body.due_date,
        body.notification_email,
        default_email=user.email,
    )


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    body: TaskUpdate,
    repo: TaskRepository = Depends(get_task_repository),
    user: Identity = Depends(get_current_user),
):
    # 요청에 실제로 들어온 필드만 병합
    return repo.update(user.user_id, task_id, body.model_dump(exclude_unset=True))


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    repo: TaskRepository = Depends(get_task_repository),
    user: Identity = Depends(get_current_user),
):
    repo.delete(user.user_id, task_id)
    return {"message": "Todo deleted successfully"}
