"""Canvas JSON API: creation, graph load/save, rename and nesting."""

from typing import Optional

import psycopg
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from mindgrid.database.canvases import (
    create_canvas,
    create_canvas_from_ai,
    create_sub_canvas,
    get_breadcrumbs,
    get_sub_canvas,
    rename_canvas,
)
from mindgrid.database.graph import load_canvas, save_graph
from mindgrid.dependencies.auth import get_current_user
from mindgrid.exceptions.errors import MindGridError, UserInputError
from mindgrid.helpers import unexpected_error_response
from mindgrid.models.requests import (
    CreateCanvasFromAIRequest,
    CreateCanvasRequest,
    CreateSubCanvasRequest,
    RenameCanvasRequest,
    SaveGraphRequest,
)
from mindgrid.models.responses import CreateCanvasResponse, SaveGraphResponse
from mindgrid.utils.debug import print__canvas_debug

router = APIRouter()


def canvas_path(canvas_id) -> str:
    return f"/canvas/{canvas_id}"


# ==============================================================================
# CREATE / LOAD / SAVE
# ==============================================================================
@router.post("/api/canvas", response_model=CreateCanvasResponse)
async def create_canvas_endpoint(
    request: CreateCanvasRequest, user=Depends(get_current_user)
):
    """Create a canvas and tell the client where to navigate.

    An empty name is rejected with 400 before anything is written. Database
    errors surface their message.
    """
    try:
        canvas = await create_canvas(
            user["sub"],
            request.name,
            description=request.description,
            folder_id=request.folder_id,
        )
        return {"canvas": canvas, "redirect_to": canvas_path(canvas["id"])}
    except (HTTPException, MindGridError):
        raise
    except psycopg.Error as e:
        print__canvas_debug(f"Canvas creation error: {type(e).__name__}: {e}")
        return JSONResponse(status_code=500, content={"error": str(e).strip()})
    except Exception as e:
        return unexpected_error_response(e, "create_canvas")


@router.post("/api/canvas/create-from-ai")
async def create_canvas_from_ai_endpoint(
    request: CreateCanvasFromAIRequest, user=Depends(get_current_user)
):
    """Store a generated mind map (and its nested canvases) as a new canvas."""
    try:
        if not (request.name or "").strip() or request.nodes is None or request.edges is None:
            raise UserInputError("Name, nodes, and edges are required")

        created = await create_canvas_from_ai(
            user["sub"],
            request.name,
            request.nodes,
            request.edges,
            description=request.description,
            folder_id=request.folder_id,
            metadata=request.metadata,
            sub_canvases=request.sub_canvases,
        )
        canvas = created["canvas"]
        return {
            "id": canvas["id"],
            "success": True,
            "canvas": {
                "id": canvas["id"],
                "name": canvas["name"],
                "description": canvas.get("description"),
                "nodeCount": len(request.nodes),
                "edgeCount": len(request.edges),
                "subCanvasCount": len(created["sub_canvas_ids"]),
            },
        }
    except (HTTPException, MindGridError):
        raise
    except psycopg.Error as e:
        print__canvas_debug(f"AI canvas creation error: {type(e).__name__}: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to create canvas from AI"})
    except Exception as e:
        return unexpected_error_response(e, "create_canvas_from_ai")


@router.get("/api/canvas/{canvas_id}")
async def get_canvas_endpoint(canvas_id: str, user=Depends(get_current_user)):
    try:
        return await load_canvas(user["sub"], canvas_id)
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "get_canvas", canvas_id=canvas_id)


@router.put("/api/canvas/{canvas_id}/graph", response_model=SaveGraphResponse)
async def save_canvas_graph(
    canvas_id: str, request: SaveGraphRequest, user=Depends(get_current_user)
):
    try:
        return await save_graph(user["sub"], canvas_id, request.nodes, request.edges)
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "save_canvas_graph", canvas_id=canvas_id)


@router.patch("/api/canvas/{canvas_id}")
async def rename_canvas_endpoint(
    canvas_id: str, request: RenameCanvasRequest, user=Depends(get_current_user)
):
    try:
        canvas, relabeled = await rename_canvas(user["sub"], canvas_id, request.name)
        return {"canvas": canvas, "synapse_nodes_updated": relabeled}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "rename_canvas", canvas_id=canvas_id)


# ==============================================================================
# NESTED CANVASES
# ==============================================================================
@router.post("/api/canvas/{canvas_id}/sub-canvas")
async def create_sub_canvas_endpoint(
    canvas_id: str, request: CreateSubCanvasRequest, user=Depends(get_current_user)
):
    try:
        sub_canvas = await create_sub_canvas(
            user["sub"], canvas_id, request.parent_node_id, request.group_name
        )
        return {"subCanvas": sub_canvas}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "create_sub_canvas", canvas_id=canvas_id)


@router.get("/api/canvas/{canvas_id}/sub-canvas")
async def get_sub_canvas_endpoint(
    canvas_id: str,
    node_id: Optional[str] = Query(None, alias="nodeId"),
    user=Depends(get_current_user),
):
    try:
        sub_canvas = await get_sub_canvas(user["sub"], canvas_id, node_id)
        return {"subCanvas": sub_canvas}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "get_sub_canvas", canvas_id=canvas_id)


@router.get("/api/canvas/{canvas_id}/breadcrumbs")
async def get_breadcrumbs_endpoint(canvas_id: str, user=Depends(get_current_user)):
    try:
        return {"breadcrumbs": await get_breadcrumbs(user["sub"], canvas_id)}
    except (HTTPException, MindGridError):
        raise
    except Exception as e:
        return unexpected_error_response(e, "get_breadcrumbs", canvas_id=canvas_id)
