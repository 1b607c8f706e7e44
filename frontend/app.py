"""Simple web frontend for browsing JSONPath search results."""

import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from backends.search import SearchEngineFactory
from core.config import SearchConfig
from core.exceptions import SearchRootError
from core.models import SearchRequest
from core.reporting import render_report, report_to_dict

load_dotenv()

app = FastAPI(title="JSONPath Search")

# Templates
templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

search_config = SearchConfig()


def _search(directory: str, query: str, max_results: int):
    request = SearchRequest(directory=directory, query=query, max_results=max_results)
    engine = SearchEngineFactory.create_engine(search_config, max_results=request.max_results or None)
    return engine.search_with_report(request.directory, request.query)


def _errors(exc: ValidationError) -> str:
    return "; ".join(error["msg"] for error in exc.errors())


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Main page."""
    return templates.TemplateResponse(request, "index.html", {"error": None, "directory": "", "query": ""})


@app.post("/api/search")
def api_search(directory: str = Form(...), query: str = Form(...), max_results: int = Form(0)):
    """Search a directory and return the matches as JSON."""
    try:
        report = _search(directory, query, max_results)
    except ValidationError as e:
        return {"success": False, "error": _errors(e)}
    except SearchRootError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, **report_to_dict(report)}


@app.post("/results", response_class=HTMLResponse)
def results(request: Request, directory: str = Form(...), query: str = Form(...), max_results: int = Form(0)):
    """Search a directory and show the results table."""
    try:
        report = _search(directory, query, max_results)
    except (ValidationError, SearchRootError) as e:
        message = _errors(e) if isinstance(e, ValidationError) else str(e)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"error": message, "directory": directory, "query": query},
            status_code=400,
        )

    return HTMLResponse(render_report(report, "html", show_skipped=True))


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("FRONTEND_PORT", "3000"))
    uvicorn.run(app, host="0.0.0.0", port=port)
