from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from app.api.deps import get_entity_service
from app.core.validation import ensure_valid_entity_name
from app.schemas.entity import EntityEnvelope, EntityListEnvelope, EntityRequest, EntityResponse
from app.schemas.error import ErrorResponse
from app.services.entity_service import EntityNotFoundError, EntityService

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Bad Request"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Not Found"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Database Error"},
}

router = APIRouter(prefix="/api/v1/entities", tags=["entities"], responses=ERROR_RESPONSES)

# Ids outside the signed 64-bit range cannot name a row; reject them as bad input.
EntityId = Annotated[int, Path(ge=-(2**63), le=2**63 - 1)]


@router.get("/", response_model=EntityListEnvelope, include_in_schema=False)
@router.get("", response_model=EntityListEnvelope, summary="List all entities")
def list_entities(service: EntityService = Depends(get_entity_service)):
    items = [EntityResponse.model_validate(e) for e in service.get_all()]
    return EntityListEnvelope(data=items, count=len(items))


@router.post("/", response_model=EntityEnvelope, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@router.post(
    "",
    response_model=EntityEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an entity",
)
def create_entity(payload: EntityRequest, service: EntityService = Depends(get_entity_service)):
    ensure_valid_entity_name(payload.name)
    entity = service.create(payload)
    return EntityEnvelope(data=EntityResponse.model_validate(entity))


@router.get("/{entity_id}", response_model=EntityEnvelope, summary="Get entity by ID")
def get_entity(entity_id: EntityId, service: EntityService = Depends(get_entity_service)):
    entity = service.get_by_id(entity_id)
    if entity is None:
        raise EntityNotFoundError(entity_id)
    return EntityEnvelope(data=EntityResponse.model_validate(entity))


@router.put("/{entity_id}", response_model=EntityEnvelope, summary="Update an entity")
def update_entity(
    entity_id: EntityId,
    payload: EntityRequest,
    service: EntityService = Depends(get_entity_service),
):
    ensure_valid_entity_name(payload.name)
    entity = service.update(entity_id, payload)
    return EntityEnvelope(data=EntityResponse.model_validate(entity))


@router.delete(
    "/{entity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete an entity",
)
def delete_entity(entity_id: EntityId, service: EntityService = Depends(get_entity_service)):
    service.delete(entity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
