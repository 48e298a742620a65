from fastapi import FastAPI, HTTPException, Depends, Header, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
import logging
from contextlib import contextmanager
from typing import Optional
from threading import Lock

from src.cells.attendance import set_attendance
from src.cells.location import save_cell_location
from src.db.database import get_db
from src.errors import AppError, NotFoundError, InvalidInputError, PermissionDenied, QuotaExceeded, RemoteFailure
from src.feed.reconciler import FeedReconciler
from src.feed.repository import FeedRepository
from src.geocoding.resolver import AddressResolver
from src.minutes.summary import request_summary
from src.models.address import Address, Coordinates, normalize_postal_code

# Configure logging - Adjust format to remove INFO/WARNING prefixes
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="IPR Sinop Connect API",
    description="Cell locations, social feed and meeting minutes for IPR Sinop",
    version="1.0.0"
)

# Most specific first: QuotaExceeded is a PermissionDenied
STATUS_BY_ERROR = [
    (QuotaExceeded, 429),
    (PermissionDenied, 403),
    (NotFoundError, 404),
    (InvalidInputError, 422),
    (RemoteFailure, 502),
]

# Feed projection of each user, kept between requests
# Format: {user_id: FeedReconciler}
feed_sessions = {}
# One lock per user serializes the operations on that user's projection
# Format: {user_id: Lock}
feed_locks = {}
feed_locks_lock = Lock()


class CellLocationIn(BaseModel):
    postal_code: str = ""
    street: str = ""
    number: Optional[str] = None
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class PostIn(BaseModel):
    content: str = ""
    image_url: Optional[str] = None


class CommentIn(BaseModel):
    content: str


class PinIn(BaseModel):
    pinned: bool


class AttendanceIn(BaseModel):
    present: bool


def get_resolver():
    return AddressResolver()


def get_repository():
    return FeedRepository()


def http_error(error):
    status = next((code for cls, code in STATUS_BY_ERROR if isinstance(error, cls)), 500)
    return HTTPException(status_code=status, detail={"title": error.title, "description": error.description})


def get_feed_lock(user_id):
    with feed_locks_lock:
        return feed_locks.setdefault(user_id, Lock())


@contextmanager
def feed_session(user_id, repository):
    """
    Yield the feed projection of a user, creating and loading it on first use.
    The user's lock is held until the block exits.
    """
    with get_feed_lock(user_id):
        reconciler = feed_sessions.get(user_id)
        if reconciler is None:
            profile = repository.get_profile(user_id)
            reconciler = FeedReconciler(profile, repository=repository)
            reconciler.load_page(0, replace=True)
            feed_sessions[user_id] = reconciler
        yield reconciler


def feed_response(reconciler, **extra):
    result = {
        "page": reconciler.page,
        "posts": [post.model_dump(mode="json") for post in reconciler.posts],
        "notices": [notice.model_dump() for notice in reconciler.drain_notices()],
    }
    result.update(extra)
    return result


@app.get("/")
def read_root():
    return {"message": "Welcome to the IPR Sinop Connect API"}


@app.get("/address/{postal_code}")
def resolve_address(postal_code: str, resolver: AddressResolver = Depends(get_resolver)):
    """
    Resolve a CEP into an address and, when any provider finds it, coordinates.
    A null `coordinates` means the location has to be picked on the map.
    """
    try:
        result = resolver.resolve(postal_code)
        notices = [notice.model_dump() for notice in result.notices]

        if result.address is None:
            status = 502 if result.lookup_failed else 404
            title = notices[-1]["title"] if notices else "CEP não encontrado"
            raise HTTPException(status_code=status, detail={"title": title, "notices": notices})

        return {
            "address": result.address.model_dump(),
            "coordinates": result.coordinates.model_dump() if result.coordinates else None,
            "provider": result.provider,
            "notices": notices,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error resolving CEP {postal_code}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.put("/cells/{cell_id}/location")
def update_cell_location(cell_id: str, body: CellLocationIn, db: Session = Depends(get_db)):
    try:
        address = Address(
            postal_code=normalize_postal_code(body.postal_code),
            street=body.street,
            neighborhood=body.neighborhood,
            city=body.city,
            state=body.state,
        )
        coordinates = None
        if body.latitude is not None and body.longitude is not None:
            coordinates = Coordinates(latitude=body.latitude, longitude=body.longitude)

        cell = save_cell_location(db, cell_id, address, coordinates, number=body.number)
        return {
            "id": cell.id,
            "address": cell.address,
            "number": cell.number,
            "neighborhood": cell.neighborhood,
            "city": cell.city,
            "state": cell.state,
            "latitude": cell.latitude,
            "longitude": cell.longitude,
            "notices": [{"title": "Localização atualizada com sucesso!"}],
        }
    except AppError as e:
        raise http_error(e)


@app.put("/cells/meetings/{meeting_id}/attendance/{member_id}")
def update_attendance(meeting_id: str, member_id: str, body: AttendanceIn, db: Session = Depends(get_db)):
    try:
        attendance = set_attendance(db, meeting_id, member_id, body.present)
        return {"meeting_id": meeting_id, "attendance": attendance}
    except AppError as e:
        raise http_error(e)


@app.get("/feed")
def read_feed(
    page: int = Query(0, ge=0),
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    """Page 0 reloads the feed; any other page is appended to what is already loaded."""
    try:
        with feed_session(x_user_id, repository) as reconciler:
            if page == 0:
                reconciler.load_page(0, replace=True)
            elif page != reconciler.page:
                reconciler.load_page(page)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.post("/feed/posts", status_code=201)
def create_post(body: PostIn, x_user_id: str = Header(...), repository: FeedRepository = Depends(get_repository)):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            post_id = reconciler.create_post(body.content, body.image_url)
            return feed_response(reconciler, post_id=post_id)
    except AppError as e:
        raise http_error(e)


@app.post("/feed/posts/{post_id}/like")
def toggle_like(post_id: str, x_user_id: str = Header(...), repository: FeedRepository = Depends(get_repository)):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            liked = reconciler.toggle_like(post_id)
            post = reconciler.get_post(post_id)
            return {
                "post_id": post_id,
                "is_liked": liked,
                "like_count": len(post.likes) if post else None,
                "notices": [n.model_dump() for n in reconciler.drain_notices()],
            }
    except AppError as e:
        raise http_error(e)


@app.post("/feed/posts/{post_id}/comments", status_code=201)
def add_comment(
    post_id: str,
    body: CommentIn,
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            comment = reconciler.add_comment(post_id, body.content)
            if comment is None:
                raise InvalidInputError("Comentário vazio")
            return comment.model_dump(mode="json")
    except AppError as e:
        raise http_error(e)


@app.patch("/feed/posts/{post_id}/comments/{comment_id}")
def edit_comment(
    post_id: str,
    comment_id: str,
    body: CommentIn,
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            reconciler.edit_comment(post_id, comment_id, body.content)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.delete("/feed/posts/{post_id}/comments/{comment_id}")
def delete_comment(
    post_id: str,
    comment_id: str,
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            reconciler.delete_comment(post_id, comment_id)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.patch("/feed/posts/{post_id}")
def edit_post(
    post_id: str,
    body: PostIn,
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            reconciler.edit_post(post_id, body.content)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.delete("/feed/posts/{post_id}")
def delete_post(post_id: str, x_user_id: str = Header(...), repository: FeedRepository = Depends(get_repository)):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            reconciler.delete_post(post_id)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.post("/feed/posts/{post_id}/pin")
def toggle_pin(
    post_id: str,
    body: PinIn,
    x_user_id: str = Header(...),
    repository: FeedRepository = Depends(get_repository)
):
    try:
        with feed_session(x_user_id, repository) as reconciler:
            reconciler.toggle_pin(post_id, body.pinned)
            return feed_response(reconciler)
    except AppError as e:
        raise http_error(e)


@app.post("/minutes/{minute_id}/summary")
def generate_minute_summary(minute_id: str, db: Session = Depends(get_db)):
    """Trigger the AI summary workflow for a minute with an attached PDF."""
    try:
        summary = request_summary(db, minute_id)
        return {
            "minute_id": minute_id,
            "summary": summary,
            "notices": [{
                "title": "Resumo gerado com sucesso!",
                "description": "A IA analisou a ata e atualizou o resumo.",
            }],
        }
    except AppError as e:
        raise http_error(e)
