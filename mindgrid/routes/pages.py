"""Server-rendered pages and the session redirects around them.

Public pages send signed-in visitors to the dashboard; the authenticated
section sends anonymous visitors to the login page.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from mindgrid.database.canvases import create_canvas, list_canvases
from mindgrid.database.folders import list_folders
from mindgrid.database.graph import load_canvas, load_public_canvas
from mindgrid.dependencies.auth import get_optional_user
from mindgrid.exceptions.errors import NotFoundError, UserInputError
from mindgrid.pages.markup import (
    render_auth_error,
    render_canvas_not_found,
    render_canvas_page,
    render_dashboard,
    render_landing,
    render_login,
    render_new_canvas_form,
    render_shared_canvas,
    render_shared_canvas_error,
)
from mindgrid.routes.canvas import canvas_path
from mindgrid.utils.debug import print__pages_debug

router = APIRouter()

DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/auth/login"


def redirect(path: str) -> RedirectResponse:
    print__pages_debug(f"↪️ Redirect to {path}")
    return RedirectResponse(url=path, status_code=303)


def is_canvas_id(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


# ==============================================================================
# PUBLIC PAGES
# ==============================================================================
@router.get("/", response_class=HTMLResponse)
async def landing_page(user=Depends(get_optional_user)):
    if user:
        return redirect(DASHBOARD_PATH)
    return HTMLResponse(render_landing())


@router.get("/auth/login", response_class=HTMLResponse)
async def login_page(user=Depends(get_optional_user)):
    if user:
        return redirect(DASHBOARD_PATH)
    return HTMLResponse(render_login())


@router.get("/auth/auth-error", response_class=HTMLResponse)
async def auth_error_page():
    return HTMLResponse(render_auth_error())


# ==============================================================================
# AUTHENTICATED PAGES
# ==============================================================================
@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(user=Depends(get_optional_user)):
    if not user:
        return redirect(LOGIN_PATH)
    canvases = await list_canvases(user["sub"])
    return HTMLResponse(render_dashboard(user.get("email"), canvases))


@router.get("/canvas/new", response_class=HTMLResponse)
async def new_canvas_page(user=Depends(get_optional_user)):
    if not user:
        return redirect(LOGIN_PATH)
    folders = await list_folders(user["sub"])
    return HTMLResponse(render_new_canvas_form(folders))


@router.post("/canvas/new", response_class=HTMLResponse)
async def new_canvas_submit(
    name: str = Form(""),
    description: Optional[str] = Form(None),
    folder_id: Optional[str] = Form(None),
    user=Depends(get_optional_user),
):
    """Create the canvas and send the browser to it (303 See Other).

    On failure the form is rendered again with the error message and the
    values the user typed.
    """
    if not user:
        return redirect(LOGIN_PATH)

    user_id = user["sub"]
    try:
        canvas = await create_canvas(
            user_id, name, description=description, folder_id=folder_id
        )
    except Exception as e:
        status_code = 400 if isinstance(e, UserInputError) else 500
        message = e.message if isinstance(e, UserInputError) else str(e).strip()
        print__pages_debug(f"Canvas creation error: {type(e).__name__}: {message}")
        try:
            folders = await list_folders(user_id)
        except Exception as folders_error:
            print__pages_debug(f"Folder reload failed: {folders_error}")
            folders = []
        return HTMLResponse(
            render_new_canvas_form(
                folders,
                error=message or "Failed to create canvas",
                name=name,
                description=description,
                folder_id=folder_id,
            ),
            status_code=status_code,
        )

    return redirect(canvas_path(canvas["id"]))


@router.get("/canvas/{canvas_id}", response_class=HTMLResponse)
async def canvas_page(canvas_id: str, user=Depends(get_optional_user)):
    """Editor shell for an owned canvas; 404 page for anything else."""
    if not user:
        return redirect(LOGIN_PATH)
    if not is_canvas_id(canvas_id):
        return HTMLResponse(render_canvas_not_found(), status_code=404)
    try:
        loaded = await load_canvas(user["sub"], canvas_id)
    except NotFoundError:
        print__pages_debug(f"Canvas {canvas_id} not found for {user['sub']}")
        return HTMLResponse(render_canvas_not_found(), status_code=404)
    return HTMLResponse(render_canvas_page(loaded["canvas"]))


# ==============================================================================
# SHARED CANVASES
# ==============================================================================
SHARE_NOT_FOUND = "This mind map is not publicly shared or does not exist."
SHARE_LOAD_FAILED = "Failed to load mind map."


@router.get("/share/{canvas_id}", response_class=HTMLResponse)
async def shared_canvas_page(canvas_id: str):
    """Read-only view of a public canvas. No session required."""
    if not is_canvas_id(canvas_id):
        return HTMLResponse(render_shared_canvas_error(SHARE_NOT_FOUND), status_code=404)
    try:
        loaded = await load_public_canvas(canvas_id)
    except NotFoundError:
        return HTMLResponse(render_shared_canvas_error(SHARE_NOT_FOUND), status_code=404)
    except Exception as e:
        print__pages_debug(f"Error loading shared canvas: {type(e).__name__}: {e}")
        return HTMLResponse(render_shared_canvas_error(SHARE_LOAD_FAILED), status_code=500)
    return HTMLResponse(
        render_shared_canvas(loaded["canvas"], loaded["nodes"], loaded["edges"])
    )
