# smrt/services/resource_service.py
"""
CRUD for the project resource tree, shared by the session and CLI routers.

Callers authorize first (project membership or API key); everything here
only checks that a child row really sits inside the project it was
addressed through, raising NotFound otherwise.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from smrt.errors import NotFound
from smrt.models.project import Discussion, DiscussionMessage, Feature, Project, Requirement, project_members
from smrt.models.user import User


# ---------------------- GENERIC ----------------------
async def list_in_project(db: AsyncSession, model, project_id: str, newest_first: bool = True) -> List[Any]:
    order = model.created_at.desc() if newest_first else model.created_at.asc()
    q = await db.execute(select(model).filter_by(project_id=project_id).order_by(order))
    return list(q.scalars().all())


async def get_in_project(db: AsyncSession, model, project_id: str, item_id: str, label: str):
    q = await db.execute(select(model).filter_by(id=item_id, project_id=project_id))
    item = q.scalars().first()
    if item is None:
        raise NotFound(f"{label} not found")
    return item


async def create(db: AsyncSession, model, **values):
    item = model(**values)
    db.add(item)
    await db.commit()
    return item


async def update(db: AsyncSession, item, values: Dict[str, Any]):
    """Apply only the fields the caller actually sent."""
    for field, value in values.items():
        setattr(item, field, value)
    await db.commit()
    return item


async def remove(db: AsyncSession, item) -> None:
    # children go with the row through ON DELETE CASCADE
    model = type(item)
    await db.execute(delete(model).where(model.id == item.id))
    await db.commit()


# ---------------------- PROJECTS ----------------------
async def list_projects_for_user(db: AsyncSession, user_id: str) -> List[Project]:
    q = await db.execute(
        select(Project)
        .join(project_members, project_members.c.project_id == Project.id)
        .where(project_members.c.user_id == user_id)
        .order_by(Project.created_at.desc())
    )
    return list(q.scalars().all())


async def create_project(db: AsyncSession, user_id: str, name: str, description: Optional[str] = None) -> Project:
    owner = await db.get(User, user_id)
    project = Project(name=name, description=description, members=[owner])
    db.add(project)
    await db.commit()
    return project


async def get_project(db: AsyncSession, project_id: str) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


# ---------------------- FEATURE REQUIREMENTS ----------------------
async def get_feature(db: AsyncSession, project_id: str, feature_id: str) -> Feature:
    return await get_in_project(db, Feature, project_id, feature_id, "Feature")


async def list_requirements(db: AsyncSession, feature_id: str) -> List[Requirement]:
    q = await db.execute(
        select(Requirement).filter_by(feature_id=feature_id).order_by(Requirement.created_at.asc())
    )
    return list(q.scalars().all())


async def get_requirement(db: AsyncSession, feature_id: str, requirement_id: str) -> Requirement:
    q = await db.execute(select(Requirement).filter_by(id=requirement_id, feature_id=feature_id))
    requirement = q.scalars().first()
    if requirement is None:
        raise NotFound("Requirement not found")
    return requirement


# ---------------------- DISCUSSION MESSAGES ----------------------
async def get_discussion(db: AsyncSession, project_id: str, discussion_id: str) -> Discussion:
    return await get_in_project(db, Discussion, project_id, discussion_id, "Discussion")


async def list_messages(db: AsyncSession, discussion_id: str) -> List[DiscussionMessage]:
    q = await db.execute(
        select(DiscussionMessage)
        .filter_by(discussion_id=discussion_id)
        .order_by(DiscussionMessage.created_at.asc())
    )
    return list(q.scalars().all())


async def get_message(db: AsyncSession, discussion_id: str, message_id: str) -> DiscussionMessage:
    q = await db.execute(select(DiscussionMessage).filter_by(id=message_id, discussion_id=discussion_id))
    message = q.scalars().first()
    if message is None:
        raise NotFound("Message not found")
    return message

