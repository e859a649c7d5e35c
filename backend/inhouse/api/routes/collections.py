"""
Collection introspection endpoints
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from inhouse.api.dependencies import get_resource, get_store
from inhouse.database.mongodb import StoreContext
from inhouse.resources.registry import Resource
from inhouse.services.document_service import document_service
from inhouse.utils.serialization import to_jsonable

router = APIRouter()


@router.get("")
async def list_collections(store: StoreContext = Depends(get_store)):
    """Names of all user-visible collections"""
    return await document_service.list_collections(store)


@router.get("/{resource}")
async def describe_collection(resource: Resource = Depends(get_resource)):
    """Document count and inferred schema of one collection"""
    description = await document_service.describe(resource)
    return JSONResponse(content=to_jsonable(description))
