# smrt/routers/cli.py
"""
Machine-client surface. Every route is addressed as /api/cli/{project_id}/{key_id}/...
and authenticated by the raw key secret in the `x-cli-secret` header.

Unlike the session surface, a wrong project/key pair answers 404 here and a
wrong secret 401.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smrt.deps import require_cli_key
from smrt.models.project import Condition, Discussion, DiscussionMessage, Feature, Key, ProjectRequirement, Requirement
from smrt.schemas import (
    CheckOut,
    ConditionIn,
    ConditionOut,
    ConditionPatch,
    DiscussionOut,
    FeatureIn,
    FeatureOut,
    FeaturePatch,
    MessageIn,
    MessageOut,
    MessagePatch,
    NameIn,
    NamePatch,
    ProjectOut,
    ProjectPatch,
    ProjectRequirementOut,
    RequirementIn,
    RequirementOut,
    RequirementPatch,
    StatusOut,
)
from smrt.services import resource_service as rs
from smrt.utils.database import get_db

router = APIRouter(prefix="/api/cli/{project_id}/{key_id}", tags=["cli"], dependencies=[Depends(require_cli_key)])
logger = logging.getLogger("smrt.cli")

OK = {"status": "ok"}


@router.get("/check", response_model=CheckOut)
async def check(key: Key = Depends(require_cli_key)):
    logger.info(f"CLI key {key.id} validated for project {key.project_id}")
    return CheckOut(validated=True, project={"id": key.project_id}, key_id=key.id)


# ---------------------- PROJECT ----------------------
@router.get("", response_model=ProjectOut)
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.get_project(db, project_id)


@router.patch("", response_model=ProjectOut)
async def update_project(project_id: str, payload: ProjectPatch, db: AsyncSession = Depends(get_db)):
    project = await rs.get_project(db, project_id)
    return await rs.update(db, project, payload.changes())


# ---------------------- CONDITIONS ----------------------
@router.get("/conditions", response_model=List[ConditionOut])
async def list_conditions(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Condition, project_id)


@router.post("/condition", response_model=ConditionOut)
async def create_condition(project_id: str, payload: ConditionIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Condition, project_id=project_id, **payload.model_dump())


@router.patch("/condition/{item_id}", response_model=ConditionOut)
async def update_condition(project_id: str, item_id: str, payload: ConditionPatch, db: AsyncSession = Depends(get_db)):
    condition = await rs.get_in_project(db, Condition, project_id, item_id, "Condition")
    return await rs.update(db, condition, payload.changes())


@router.delete("/condition/{item_id}", response_model=StatusOut)
async def delete_condition(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    condition = await rs.get_in_project(db, Condition, project_id, item_id, "Condition")
    await rs.remove(db, condition)
    return OK


# ---------------------- FEATURES ----------------------
@router.get("/features", response_model=List[FeatureOut])
async def list_features(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Feature, project_id)


@router.post("/feature", response_model=FeatureOut)
async def create_feature(project_id: str, payload: FeatureIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Feature, project_id=project_id, **payload.model_dump())


@router.patch("/feature/{item_id}", response_model=FeatureOut)
async def update_feature(project_id: str, item_id: str, payload: FeaturePatch, db: AsyncSession = Depends(get_db)):
    feature = await rs.get_feature(db, project_id, item_id)
    return await rs.update(db, feature, payload.changes())


@router.delete("/feature/{item_id}", response_model=StatusOut)
async def delete_feature(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    feature = await rs.get_feature(db, project_id, item_id)
    await rs.remove(db, feature)
    return OK


# ---------------------- FEATURE REQUIREMENTS ----------------------
@router.get("/feature/{feature_id}/requirements", response_model=List[RequirementOut])
async def list_requirements(project_id: str, feature_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    return await rs.list_requirements(db, feature_id)


@router.post("/feature/{feature_id}/requirement", response_model=RequirementOut)
async def create_requirement(project_id: str, feature_id: str, payload: RequirementIn, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    return await rs.create(db, Requirement, feature_id=feature_id, **payload.model_dump())


@router.patch("/feature/{feature_id}/requirement/{item_id}", response_model=RequirementOut)
async def update_requirement(
    project_id: str, feature_id: str, item_id: str, payload: RequirementPatch, db: AsyncSession = Depends(get_db)
):
    await rs.get_feature(db, project_id, feature_id)
    requirement = await rs.get_requirement(db, feature_id, item_id)
    return await rs.update(db, requirement, payload.changes())


@router.delete("/feature/{feature_id}/requirement/{item_id}", response_model=StatusOut)
async def delete_requirement(project_id: str, feature_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_feature(db, project_id, feature_id)
    requirement = await rs.get_requirement(db, feature_id, item_id)
    await rs.remove(db, requirement)
    return OK


# ---------------------- DISCUSSIONS ----------------------
@router.get("/discussions", response_model=List[DiscussionOut])
async def list_discussions(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, Discussion, project_id)


@router.post("/discussion", response_model=DiscussionOut)
async def create_discussion(project_id: str, payload: NameIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, Discussion, project_id=project_id, name=payload.name)


@router.get("/discussion/{item_id}", response_model=DiscussionOut)
async def get_discussion(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.get_discussion(db, project_id, item_id)


@router.patch("/discussion/{item_id}", response_model=DiscussionOut)
async def update_discussion(project_id: str, item_id: str, payload: NamePatch, db: AsyncSession = Depends(get_db)):
    discussion = await rs.get_discussion(db, project_id, item_id)
    return await rs.update(db, discussion, payload.changes())


@router.delete("/discussion/{item_id}", response_model=StatusOut)
async def delete_discussion(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    discussion = await rs.get_discussion(db, project_id, item_id)
    await rs.remove(db, discussion)
    return OK


# ---------------------- DISCUSSION MESSAGES ----------------------
@router.get("/discussion/{discussion_id}/messages", response_model=List[MessageOut])
async def list_messages(project_id: str, discussion_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_discussion(db, project_id, discussion_id)
    return await rs.list_messages(db, discussion_id)


@router.post("/discussion/{discussion_id}/message", response_model=MessageOut)
async def create_message(
    project_id: str,
    discussion_id: str,
    payload: MessageIn,
    key: Key = Depends(require_cli_key),
    db: AsyncSession = Depends(get_db),
):
    await rs.get_discussion(db, project_id, discussion_id)
    # CLI messages are signed with the key's name
    return await rs.create(db, DiscussionMessage, discussion_id=discussion_id, body=payload.body, author_name=key.name)


@router.patch("/discussion/{discussion_id}/message/{item_id}", response_model=MessageOut)
async def update_message(
    project_id: str, discussion_id: str, item_id: str, payload: MessagePatch, db: AsyncSession = Depends(get_db)
):
    await rs.get_discussion(db, project_id, discussion_id)
    message = await rs.get_message(db, discussion_id, item_id)
    return await rs.update(db, message, payload.changes())


@router.delete("/discussion/{discussion_id}/message/{item_id}", response_model=StatusOut)
async def delete_message(project_id: str, discussion_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    await rs.get_discussion(db, project_id, discussion_id)
    message = await rs.get_message(db, discussion_id, item_id)
    await rs.remove(db, message)
    return OK


# ---------------------- PROJECT REQUIREMENTS ----------------------
@router.get("/project-requirements", response_model=List[ProjectRequirementOut])
async def list_project_requirements(project_id: str, db: AsyncSession = Depends(get_db)):
    return await rs.list_in_project(db, ProjectRequirement, project_id, newest_first=False)


@router.post("/project-requirement", response_model=ProjectRequirementOut)
async def create_project_requirement(project_id: str, payload: NameIn, db: AsyncSession = Depends(get_db)):
    return await rs.create(db, ProjectRequirement, project_id=project_id, name=payload.name)


@router.patch("/project-requirement/{item_id}", response_model=ProjectRequirementOut)
async def update_project_requirement(project_id: str, item_id: str, payload: NamePatch, db: AsyncSession = Depends(get_db)):
    requirement = await rs.get_in_project(db, ProjectRequirement, project_id, item_id, "Project requirement")
    return await rs.update(db, requirement, payload.changes())


@router.delete("/project-requirement/{item_id}", response_model=StatusOut)
async def delete_project_requirement(project_id: str, item_id: str, db: AsyncSession = Depends(get_db)):
    requirement = await rs.get_in_project(db, ProjectRequirement, project_id, item_id, "Project requirement")
    await rs.remove(db, requirement)
    return OK
