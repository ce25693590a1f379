# routes/pages.py
from pathlib import Path
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# URL path -> view
PAGES = {
    "/": "dashboard",
    "/login": "login",
}

def render_view(view: str) -> HTMLResponse:
    return HTMLResponse((TEMPLATES_DIR / f"{view}.html").read_text(encoding="utf-8"))

@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def dashboard_view():
    return render_view(PAGES["/"])

@router.get("/login", response_class=HTMLResponse, include_in_schema=False)
async def login_view():
    return render_view(PAGES["/login"])
