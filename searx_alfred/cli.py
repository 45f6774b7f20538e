"""
Purpose:
- Alfred Script Filter entry point: `searx-alfred "<query>"` prints item JSON to stdout.
- script_filter() is the top-level guard: whatever happens, Alfred gets valid JSON.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional
import typer

from .alfred.items import error_item
from .alfred.schema import ScriptFilterResponse
from .core.logger import get_logger, setup_logger
from .core.settings import Settings, get_settings
from .search.service import search

logger = get_logger(__name__)

Handler = Callable[[List[str]], Optional[ScriptFilterResponse]]


def internal_error_item(exc: BaseException, versions: Optional[Dict[str, str]] = None):
    message = str(exc).strip() or f"Unexpected error ({exc.__class__.__name__})"
    return error_item(
        "Internal Error",
        message,
        details={"type": exc.__class__.__name__, "message": message},
        versions=versions,
    )


def script_filter(handler: Handler, versions: Optional[Dict[str, str]] = None) -> Callable[[List[str]], str]:
    """
    Wrap a handler so it always returns Script Filter JSON:
    - None -> {"items": []}
    - any Exception -> a single non-actionable "Internal Error" item
    """
    def run(argv: List[str]) -> str:
        try:
            response = handler(argv)
            if response is None:
                response = ScriptFilterResponse(items=[])
        except Exception as e:
            logger.exception("script filter failed")
            response = ScriptFilterResponse(items=[internal_error_item(e, versions)])
        return response.to_json()

    return run


def _search_handler(settings: Settings) -> Handler:
    def handler(argv: List[str]) -> ScriptFilterResponse:
        query = argv[0] if argv else ""
        return search(query, settings)

    return handler


app = typer.Typer(name="searx-alfred", add_completion=False, help="Search SearXNG from Alfred.")


# No --help: whatever Alfred passes (even "--help") is a query
@app.command(add_help_option=False, context_settings={"ignore_unknown_options": True})
def main(query: str = typer.Argument("", help="Raw Alfred query, bangs included.")) -> None:
    try:
        settings = get_settings()
    except Exception as e:
        # A broken .env or env var must still produce an Alfred item
        setup_logger()
        logger.exception("could not load settings")
        typer.echo(ScriptFilterResponse(items=[internal_error_item(e)]).to_json())
        return

    setup_logger(debug=settings.alfred_debug)
    run = script_filter(_search_handler(settings), versions=settings.version_info())
    typer.echo(run([query]))


if __name__ == "__main__":
    app()
