"""
Generic resource endpoints
Any path segment names a collection; nested paths link children to a parent
"""
from typing import Any, Dict

from bson import ObjectId
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from inhouse.api.dependencies import document_body, document_id, get_parent_field, get_resource
from inhouse.resources.registry import Resource
from inhouse.services.document_service import document_service
from inhouse.utils.serialization import to_jsonable

router = APIRouter()

JSON_MEDIA_TYPE = "application/json"


async def _stream(resource: Resource, filter: Dict[str, Any]) -> StreamingResponse:
    count, chunks = await document_service.list(resource, filter)
    return StreamingResponse(
        chunks,
        media_type=JSON_MEDIA_TYPE,
        headers={"X-Total-Count": str(count)},
    )


@router.get("/{resource}")
async def list_documents(request: Request, resource: Resource = Depends(get_resource)):
    """Stream all documents, filtered by the query string"""
    return await _stream(resource, dict(request.query_params))


@router.get("/{resource}/{id}")
async def get_document(
    resource: Resource = Depends(get_resource),
    id: ObjectId = Depends(document_id),
):
    document = await document_service.get(resource, id)
    return JSONResponse(content=to_jsonable(document))


@router.get("/{main_resource}/{id}/{resource}")
async def list_child_documents(
    request: Request,
    resource: Resource = Depends(get_resource),
    parent_field: str = Depends(get_parent_field),
    id: ObjectId = Depends(document_id),
):
    """Stream the documents that belong to parent `id`"""
    filter: Dict[str, Any] = dict(request.query_params)
    filter[parent_field] = id
    return await _stream(resource, filter)


@router.post("/{resource}")
async def create_document(
    resource: Resource = Depends(get_resource),
    body: Dict[str, Any] = Depends(document_body),
):
    document = await document_service.insert(resource, body)
    return JSONResponse(content=to_jsonable(document))


@router.post("/{main_resource}/{id}/{resource}")
async def create_child_document(
    resource: Resource = Depends(get_resource),
    parent_field: str = Depends(get_parent_field),
    id: ObjectId = Depends(document_id),
    body: Dict[str, Any] = Depends(document_body),
):
    document = await document_service.insert(resource, body, parent_field, id)
    return JSONResponse(content=to_jsonable(document))


@router.put("/{resource}/{id}")
async def replace_document(
    resource: Resource = Depends(get_resource),
    id: ObjectId = Depends(document_id),
    body: Dict[str, Any] = Depends(document_body),
):
    await document_service.replace(resource, id, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{resource}/{id}")
async def delete_document(
    resource: Resource = Depends(get_resource),
    id: ObjectId = Depends(document_id),
):
    await document_service.delete(resource, id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
