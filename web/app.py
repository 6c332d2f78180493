from __future__ import annotations

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from api import router
from codedoc.archive import SUPPORTED_FORMATS
from codedoc.config import settings

app = FastAPI(title="Code Documentation Generator Web Interface")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "HEAD", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Accept"],
)

# Templates
templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))

app.include_router(router)


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Upload page."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "formats": ", ".join(SUPPORTED_FORMATS),
            "max_size_mb": settings.max_file_size // (1024 * 1024),
        },
    )


def create_app() -> FastAPI:
    return app
