# smrt/routers/projects.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smrt.deps import SessionContext, get_current_user_id, get_session_context, require_project_access
from smrt.models.project import Condition, Discussion, DiscussionMessage, Feature, ProjectRequirement, Requirement
from smrt.schemas import (
    ConditionIn,
    ConditionOut,
    ConditionPatch,
    DiscussionOut,
    FeatureIn,
    FeatureOut,
    FeaturePatch,
    KeyCreatedOut,
    KeyOut,
    MessageIn,
    MessageOut,
    MessagePatch,
    NameIn,
    NamePatch,
    ProjectIn,
    ProjectOut,
    ProjectPatch,
    ProjectRequirementOut,
    RequirementIn,
    RequirementOut,
    RequirementPatch,
    SessionOut,
    StatusOut,
)
from smrt.services import key_service, resource_service as rs, session_service, user_service
from smrt.utils.database import get_db

router = APIRouter(prefix="/api", tags=["session"])
logger = logging.getLogger("smrt.projects")

PROJECT = "/session/project/{project_id}"
OK = {"status": "ok"}


@router.get("/session", response_model=SessionOut)
async def get_session(ctx: SessionContext = Depends(get_session_context), db: AsyncSession = Depends(get_db)):
    session = await session_service.get_session(db, ctx.session_id)
    return session or {"session_id": ctx.session_id}


# ---------------------- PROJECTS ----------------------
@router.get("/session/project/list", response_model=List[ProjectOut])
async def list_projects(user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    return await rs.list_projects_for_user(db, user_id)


@router.post("/session/project/create", response_model=ProjectOut)
async def create_project(payload: ProjectIn, user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    project = await rs.create_project(db, user_id, payload.name, payload.description)
    logger.info(f"Project {project.id} created by user {user_id}")
    return project


@router.get(PROJECT, response_model=ProjectOut, dependencies=[Depends(require_project_access)])
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.get_project(db, project_id)


@router.patch(PROJECT, response_model=ProjectOut, dependencies=[Depends(require_project_access)])
async def update_project(project_id: str, payload: ProjectPatch, db: AsyncSession = Depends(get_db)):
    project = await rs.get_project(db, project_id)
    return await rs.update(db, project, payload.changes())


@router.delete(PROJECT, response_model=StatusOut, dependencies=[Depends(require_project_access)])
async def delete_project(project_id: str, db: AsyncSession = Depends(get_db)):
    project = await rs.get_project(db, project_id)
    await rs.remove(db, project)
    logger.info(f"Project {project_id} deleted")
    return OK


# ---------------------- CONDITIONS ----------------------
@router.get(PROJECT + "/conditions", response_model=List[ConditionOut], dependencies=[Depends(require_project_access)])
async def list_conditions(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Condition, project_id)


@router.post(PROJECT + "/conditions", response_model=ConditionOut, dependencies=[Depends(require_project_access)])
async def create_condition(project_id: str, payload: ConditionIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Condition, project_id=project_id, **payload.model_dump())


@router.patch(PROJECT + "/conditions/{item_id}", response_model=ConditionOut, dependencies=[Depends(require_project_access)])
async def update_condition(project_id: str, item_id: str, payload: ConditionPatch, db: AsyncSession = Depends(get_db)):
    condition = await rs.get_in_project(db, Condition, project_id, item_id, "Condition")
    return await rs.update(db, condition, payload.changes())


@router.delete(PROJECT + "/conditions/{item_id}", response_model=StatusOut, dependencies=[Depends(require_project_access)])
async def delete_condition(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    condition = await rs.get_in_project(db, Condition, project_id, item_id, "Condition")
    await rs.remove(db, condition)
    return OK


# ---------------------- FEATURES ----------------------
@router.get(PROJECT + "/features", response_model=List[FeatureOut], dependencies=[Depends(require_project_access)])
async def list_features(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Feature, project_id)


@router.post(PROJECT + "/features", response_model=FeatureOut, dependencies=[Depends(require_project_access)])
async def create_feature(project_id: str, payload: FeatureIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Feature, project_id=project_id, **payload.model_dump())


@router.patch(PROJECT + "/features/{item_id}", response_model=FeatureOut, dependencies=[Depends(require_project_access)])
async def update_feature(project_id: str, item_id: str, payload: FeaturePatch, db: AsyncSession = Depends(get_db)):
    feature = await rs.get_feature(db, project_id, item_id)
    return await rs.update(db, feature, payload.changes())


@router.delete(PROJECT + "/features/{item_id}", response_model=StatusOut, dependencies=[Depends(require_project_access)])
async def delete_feature(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    feature = await rs.get_feature(db, project_id, item_id)
    await rs.remove(db, feature)
    return OK


# ---------------------- FEATURE REQUIREMENTS ----------------------
@router.get(
    PROJECT + "/features/{feature_id}/requirements",
    response_model=List[RequirementOut],
    dependencies=[Depends(require_project_access)],
)
async def list_requirements(project_id: str, feature_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    return await rs.list_requirements(db, feature_id)


@router.post(
    PROJECT + "/features/{feature_id}/requirements",
    response_model=RequirementOut,
    dependencies=[Depends(require_project_access)],
)
async def create_requirement(project_id: str, feature_id: str, payload: RequirementIn, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    return await rs.create(db, Requirement, feature_id=feature_id, **payload.model_dump())


@router.patch(
    PROJECT + "/features/{feature_id}/requirements/{item_id}",
    response_model=RequirementOut,
    dependencies=[Depends(require_project_access)],
)
async def update_requirement(
    project_id: str, feature_id: str, item_id: str, payload: RequirementPatch, db: AsyncSession = Depends(get_db)
):
    await rs.get_feature(db, project_id, feature_id)
    requirement = await rs.get_requirement(db, feature_id, item_id)
    return await rs.update(db, requirement, payload.changes())


@router.delete(
    PROJECT + "/features/{feature_id}/requirements/{item_id}",
    response_model=StatusOut,
    dependencies=[Depends(require_project_access)],
)
async def delete_requirement(project_id: str, feature_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    requirement = await rs.get_requirement(db, feature_id, item_id)
    await rs.remove(db, requirement)
    return OK


# ---------------------- KEYS ----------------------
@router.get(PROJECT + "/keys", response_model=List[KeyOut], dependencies=[Depends(require_project_access)])
async def list_keys(project_id: str, db: AsyncSession = Depends(get_db)):
    return await key_service.list_keys(db, project_id)


@router.post(PROJECT + "/keys", response_model=KeyCreatedOut, dependencies=[Depends(require_project_access)])
async def create_key(project_id: str, payload: NameIn, db: AsyncSession = Depends(get_db)):
    key, secret = await key_service.create_key(db, project_id, payload.name)
    # the only response that ever carries the raw secret
    return KeyCreatedOut(
        id=key.id,
        name=key.name,
        project_id=key.project_id,
        created_at=key.created_at,
        token=secret,
        secret=secret,
    )


@router.delete(PROJECT + "/keys/{item_id}", response_model=StatusOut, dependencies=[Depends(require_project_access)])
async def delete_key(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    await key_service.delete_key(db, project_id, item_id)
    return OK


# ---------------------- PROJECT REQUIREMENTS ----------------------
@router.get(
    PROJECT + "/project-requirements",
    response_model=List[ProjectRequirementOut],
    dependencies=[Depends(require_project_access)],
)
async def list_project_requirements(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, ProjectRequirement, project_id, newest_first=False)


@router.post(
    PROJECT + "/project-requirements",
    response_model=ProjectRequirementOut,
    dependencies=[Depends(require_project_access)],
)
async def create_project_requirement(project_id: str, payload: NameIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, ProjectRequirement, project_id=project_id, name=payload.name)


@router.patch(
    PROJECT + "/project-requirements/{item_id}",
    response_model=ProjectRequirementOut,
    dependencies=[Depends(require_project_access)],
)
async def update_project_requirement(project_id: str, item_id: str, payload: NamePatch, db: AsyncSession = Depends(get_db)):
    requirement = await rs.get_in_project(db, ProjectRequirement, project_id, item_id, "Project requirement")
    return await rs.update(db, requirement, payload.changes())


@router.delete(
    PROJECT + "/project-requirements/{item_id}",
    response_model=StatusOut,
    dependencies=[Depends(require_project_access)],
)
async def delete_project_requirement(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    requirement = await rs.get_in_project(db, ProjectRequirement, project_id, item_id, "Project requirement")
    await rs.remove(db, requirement)
    return OK


# ---------------------- DISCUSSIONS ----------------------
@router.get(PROJECT + "/discussions", response_model=List[DiscussionOut], dependencies=[Depends(require_project_access)])
async def list_discussions(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Discussion, project_id)


@router.post(PROJECT + "/discussions", response_model=DiscussionOut, dependencies=[Depends(require_project_access)])
async def create_discussion(project_id: str, payload: NameIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Discussion, project_id=project_id, name=payload.name)


@router.get(PROJECT + "/discussions/{item_id}", response_model=DiscussionOut, dependencies=[Depends(require_project_access)])
async def get_discussion(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.get_discussion(db, project_id, item_id)


@router.patch(PROJECT + "/discussions/{item_id}", response_model=DiscussionOut, dependencies=[Depends(require_project_access)])
async def update_discussion(project_id: str, item_id: str, payload: NamePatch, db: AsyncSession = Depends(get_db)):
    discussion = await rs.get_discussion(db, project_id, item_id)
    return await rs.update(db, discussion, payload.changes())


@router.delete(PROJECT + "/discussions/{item_id}", response_model=StatusOut, dependencies=[Depends(require_project_access)])
async def delete_discussion(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    discussion = await rs.get_discussion(db, project_id, item_id)
    await rs.remove(db, discussion)
    return OK


# ---------------------- DISCUSSION MESSAGES ----------------------
@router.get(
    PROJECT + "/discussions/{discussion_id}/messages",
    response_model=List[MessageOut],
    dependencies=[Depends(require_project_access)],
)
async def list_messages(project_id: str, discussion_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_discussion(db, project_id, discussion_id)
    return await rs.list_messages(db, discussion_id)


@router.post(PROJECT + "/discussions/{discussion_id}/messages", response_model=MessageOut)
async def create_message(
    project_id: str,
    discussion_id: str,
    payload: MessageIn,
    user_id: str = Depends(require_project_access),
    db: AsyncSession = Depends(get_db),
):
    await rs.get_discussion(db, project_id, discussion_id)
    user = await user_service.get_user_by_id(db, user_id)
    return await rs.create(
        db, DiscussionMessage, discussion_id=discussion_id, body=payload.body, author_name=user.name or user.email
    )


@router.patch(
    PROJECT + "/discussions/{discussion_id}/messages/{item_id}",
    response_model=MessageOut,
    dependencies=[Depends(require_project_access)],
)
async def update_message(
    project_id: str, discussion_id: str, item_id: str, payload: MessagePatch, db: AsyncSession = Depends(get_db)
):
    await rs.get_discussion(db, project_id, discussion_id)
    message = await rs.get_message(db, discussion_id, item_id)
    return await rs.update(db, message, payload.changes())


@router.delete(
    PROJECT + "/discussions/{discussion_id}/messages/{item_id}",
    response_model=StatusOut,
    dependencies=[Depends(require_project_access)],
)
async def delete_message(project_id: str, discussion_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_discussion(db, project_id, discussion_id)
    message = await rs.get_message(db, discussion_id, item_id)
    await rs.remove(db, message)
    return OK
