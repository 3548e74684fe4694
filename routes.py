"""FastAPI routes for the Shotwell viewer."""
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import FileResponse, HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from database import get_connection
from models import Endpoint, PhotoRecord, RenditionKind
from resolver import ResolvedResource, ResourceResolver
from store import PhotoRecordStore
from utils import to_route_path

DEFAULT_PATHS = MappingProxyType({
    Endpoint.EVENTS: "/",
    Endpoint.EVENT: "/event/:event_id/:event_name",
    Endpoint.TAGS: "/tags",
    Endpoint.TAG: "/tag/*tag_name",
    Endpoint.RAW: "/raw/:id/*basename",
    Endpoint.SHOW: "/show/:id/*basename",
    Endpoint.THUMB: "/thumb/:id/*basename",
})


def fmt_datetime(value):
    """Format epoch seconds for templates."""
    try:
        return datetime.fromtimestamp(value).strftime("%Y-%m-%d %H:%M:%S")
    except (TypeError, ValueError, OverflowError, OSError):
        return str(value)


def make_templates(templates_dir: Union[str, Path]) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["datetime"] = fmt_datetime
    return env


def render(request: Request, name: str, **ctx) -> HTMLResponse:
    """Render template with context."""
    template = request.app.state.templates.get_template(name)
    ctx.setdefault("title", "Shotwell")
    ctx.setdefault("url_for", request.url_for)
    return HTMLResponse(template.render(**ctx))


def preferred_format(request: Request, fmt: Optional[str], default: str) -> str:
    """Pick a response format from ?format=, then the Accept header."""
    if fmt:
        return fmt.lower()
    accept = request.headers.get("accept", "")
    if "application/json" in accept:
        return "json"
    if "text/html" in accept:
        return "html"
    return default


def get_store(request: Request) -> Iterator[PhotoRecordStore]:
    """One connection per request, closed when the response is done."""
    with get_connection(request.app.state.engine) as conn:
        yield PhotoRecordStore(conn)


def get_resolver(request: Request, store: PhotoRecordStore = Depends(get_store)) -> ResourceResolver:
    return ResourceResolver(
        store, request.app.state.cache, request.app.state.settings.renditions
    )


def serve(resolver: ResourceResolver, photo_id: int, basename: str, kind: RenditionKind) -> FileResponse:
    """Resolve and stream a photo file."""
    outcome = resolver.resolve(photo_id, basename, kind)
    if not isinstance(outcome, ResolvedResource):
        # a wrong basename must not reveal that the id exists
        raise HTTPException(404, "Not found")
    if not outcome.path.is_file():
        logger.warning("Photo {} points at missing file {}", photo_id, outcome.path)
        raise HTTPException(404, "File missing on disk")
    return FileResponse(
        outcome.path,
        media_type=outcome.media_type,
        filename=outcome.download_name,
        content_disposition_type="inline",
    )


def events(
    request: Request,
    fmt: Optional[str] = Query(None, alias="format"),
    store: PhotoRecordStore = Depends(get_store),
):
    """List named events, newest first."""
    rows = store.list_events()
    if preferred_format(request, fmt, "html") == "json":
        return {"events": rows}
    return render(request, "events.html", title="Events", events=rows)


def event(
    request: Request,
    event_id: int,
    fmt: Optional[str] = Query(None, alias="format"),
    store: PhotoRecordStore = Depends(get_store),
):
    """Photos of one event."""
    found = store.find_event_by_id(event_id)
    if found is None:
        raise HTTPException(404, "Event not found")
    photos = store.list_photos_by_event(event_id)
    if preferred_format(request, fmt, "html") == "json":
        return {"event": found, "photos": photos}
    return render(request, "event.html", title=found.name or "Event", event=found, photos=photos)


def tags(
    request: Request,
    fmt: Optional[str] = Query(None, alias="format"),
    store: PhotoRecordStore = Depends(get_store),
):
    rows = store.list_tags()
    if preferred_format(request, fmt, "html") == "json":
        return {"tags": rows}
    return render(request, "tags.html", title="Tags", tags=rows)


def tag(
    request: Request,
    tag_name: str,
    fmt: Optional[str] = Query(None, alias="format"),
    store: PhotoRecordStore = Depends(get_store),
):
    """Photos carrying one tag."""
    found = store.find_tag_by_name(tag_name)
    if found is None:
        raise HTTPException(404, "Tag not found")
    photos = store.list_photos_by_ids(found.photo_ids)
    if preferred_format(request, fmt, "html") == "json":
        return {"tag": found, "photos": photos}
    return render(request, "tag.html", title=found.name, tag=found, photos=photos)


def raw(id: int, basename: str, resolver: ResourceResolver = Depends(get_resolver)):
    """Serve the original file."""
    return serve(resolver, id, basename, RenditionKind.RAW)


def show(
    request: Request,
    id: int,
    basename: str,
    fmt: Optional[str] = Query(None, alias="format"),
    resolver: ResourceResolver = Depends(get_resolver),
):
    """Serve the inline rendition, or a page or record describing the photo."""
    wanted = preferred_format(request, fmt, "image")
    if wanted not in ("html", "json"):
        return serve(resolver, id, basename, RenditionKind.INLINE)

    photo = resolver.lookup(id, basename)
    if not isinstance(photo, PhotoRecord):
        raise HTTPException(404, "Not found")
    if wanted == "json":
        return photo
    return render(request, "show.html", title=photo.title or photo.basename, photo=photo)


def thumb(id: int, basename: str, resolver: ResourceResolver = Depends(get_resolver)):
    """Serve the thumbnail rendition."""
    return serve(resolver, id, basename, RenditionKind.THUMB)


HANDLERS: Mapping[Endpoint, Callable] = MappingProxyType({
    Endpoint.EVENTS: events,
    Endpoint.EVENT: event,
    Endpoint.TAGS: tags,
    Endpoint.TAG: tag,
    Endpoint.RAW: raw,
    Endpoint.SHOW: show,
    Endpoint.THUMB: thumb,
})


def route_table(overrides: Optional[Mapping[Endpoint, str]] = None) -> List[Tuple[Endpoint, str]]:
    """Endpoint patterns, longest first so generic ones cannot shadow specific ones."""
    paths: Dict[Endpoint, str] = dict(DEFAULT_PATHS)
    paths.update(overrides or {})
    return sorted(paths.items(), key=lambda item: (-len(item[1]), item[0].value))


def register_routes(router: APIRouter, overrides: Optional[Mapping[Endpoint, str]] = None) -> None:
    for endpoint, pattern in route_table(overrides):
        path = to_route_path(pattern)
        router.add_api_route(
            path, HANDLERS[endpoint], methods=["GET"], name=f"shotwell_{endpoint.value}"
        )
        logger.debug("Registered {} at {}", endpoint.value, path)
