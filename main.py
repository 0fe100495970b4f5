import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

import database
from auth import create_access_token, optional_caller, require_caller
from config import settings
from database import get_db
from errors import PlantCareError
from intake import submit_complaint, subscribe, unsubscribe
from log import logger, request_id_var
from plants import filter_plants, find_plant
from posts import PostStore
from schemas import (
    CommentCreate,
    CommentOut,
    ComplaintRequest,
    FavoriteRequest,
    LoginRequest,
    LoginResponse,
    NewsletterRequest,
    PlantRecord,
    PostCreate,
    PostOut,
    ProfileUpdate,
    RegisterRequest,
    UserOut,
    VoteSummary,
)
from users import (
    add_favorite,
    authenticate,
    get_user,
    list_favorites,
    register_user,
    remove_favorite,
    update_profile,
    user_out,
)
from votes import VoteDirection

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Plantastic Care API starting up")
    try:
        database.ensure_indexes(database.db)
    except PyMongoError as e:
        logger.warning(f"Could not create indexes: {e}")
    yield
    database.client.close()
    logger.info("Plantastic Care API shut down")


app = FastAPI(title="Plantastic Care API", lifespan=lifespan)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Middleware & error handlers ----------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    start = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f} ms)")
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        request_id_var.reset(token)


@app.exception_handler(PlantCareError)
async def plant_care_error_handler(request: Request, exc: PlantCareError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else "Invalid request body"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.opt(exception=exc).error(f"Storage failure on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ---------- Dependencies ----------

def get_store(db: Database = Depends(get_db)) -> PostStore:
    return PostStore(db)


def get_plants_path() -> Path:
    return settings.plants_data_path


# ---------- Basic ----------

@app.get("/")
def root():
    return {"name": "Plantastic Care API", "status": "ok"}


@app.get("/health")
def health(db: Database = Depends(get_db)):
    response = {"status": "ok", "database": "unavailable"}
    try:
        db.command("ping")
        response["database"] = "connected"
    except Exception as e:
        response["status"] = "degraded"
        response["database"] = str(e)[:80]
    return response


# ---------- Forum posts ----------

@app.post("/posts", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(data: PostCreate, caller_id: str = Depends(require_caller), store: PostStore = Depends(get_store)):
    return store.create_post(caller_id, data.title, data.content)


@app.get("/posts", response_model=List[PostOut])
def list_posts(caller_id: Optional[str] = Depends(optional_caller), store: PostStore = Depends(get_store)):
    return store.list_posts(caller_id)


@app.get("/posts/{post_id}", response_model=PostOut)
def get_post(post_id: str, caller_id: Optional[str] = Depends(optional_caller), store: PostStore = Depends(get_store)):
    return store.get_post(post_id, caller_id)


@app.delete("/posts/{post_id}")
def delete_post(post_id: str, caller_id: str = Depends(require_caller), store: PostStore = Depends(get_store)):
    store.delete_post(post_id, caller_id)
    return {"message": "Post deleted"}


# ---------- Voting (toggle) ----------

@app.post("/posts/{post_id}/upvote", response_model=VoteSummary)
def upvote(post_id: str, caller_id: str = Depends(require_caller), store: PostStore = Depends(get_store)):
    return store.cast_vote(post_id, caller_id, VoteDirection.UP)


@app.post("/posts/{post_id}/downvote", response_model=VoteSummary)
def downvote(post_id: str, caller_id: str = Depends(require_caller), store: PostStore = Depends(get_store)):
    return store.cast_vote(post_id, caller_id, VoteDirection.DOWN)


# ---------- Comments ----------

@app.post("/posts/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    post_id: str,
    payload: CommentCreate,
    caller_id: str = Depends(require_caller),
    store: PostStore = Depends(get_store),
):
    return store.append_comment(post_id, caller_id, payload.text)


# ---------- Accounts ----------

@app.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, data: RegisterRequest, db: Database = Depends(get_db)):
    user = register_user(db, data)
    return {"message": "User registered successfully!", "user": user_out(user).model_dump(by_alias=True)}


@app.post("/login", response_model=LoginResponse)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, data: LoginRequest, db: Database = Depends(get_db)):
    user = authenticate(db, data.email, data.password)
    token = create_access_token(str(user["_id"]))
    return LoginResponse(message="Login successful", token=token, user=user_out(user))


@app.get("/verify-token")
def verify_token(caller_id: str = Depends(require_caller), db: Database = Depends(get_db)):
    return {"valid": True, "user": user_out(get_user(db, caller_id)).model_dump(by_alias=True)}


@app.get("/profile", response_model=UserOut)
def get_profile(caller_id: str = Depends(require_caller), db: Database = Depends(get_db)):
    return user_out(get_user(db, caller_id))


@app.put("/profile", response_model=UserOut)
def put_profile(data: ProfileUpdate, caller_id: str = Depends(require_caller), db: Database = Depends(get_db)):
    return user_out(update_profile(db, caller_id, data))


# ---------- Favorites ----------

@app.get("/favorites")
def get_favorites(caller_id: str = Depends(require_caller), db: Database = Depends(get_db)):
    return {"favorites": list_favorites(db, caller_id)}


@app.post("/favorites")
def post_favorite(
    data: FavoriteRequest,
    caller_id: str = Depends(require_caller),
    db: Database = Depends(get_db),
    plants_path: Path = Depends(get_plants_path),
):
    plant = find_plant(plants_path, data.plant_name)
    return {"message": "Added to favorites", "favorites": add_favorite(db, caller_id, plant.name)}


@app.delete("/favorites")
def delete_favorite(data: FavoriteRequest, caller_id: str = Depends(require_caller), db: Database = Depends(get_db)):
    return {"message": "Removed from favorites", "favorites": remove_favorite(db, caller_id, data.plant_name)}


# ---------- Plants ----------

@app.get("/plants", response_model=List[PlantRecord])
def list_plants(
    maintenance: Optional[str] = None,
    sunlight: Optional[str] = None,
    climate: Optional[str] = None,
    soilType: Optional[str] = None,
    toxicity: Optional[str] = None,
    wateringFrequency: Optional[str] = None,
    plants_path: Path = Depends(get_plants_path),
):
    filters = {
        "maintenance": maintenance,
        "sunlight": sunlight,
        "climate": climate,
        "soilType": soilType,
        "toxicity": toxicity,
        "wateringFrequency": wateringFrequency,
    }
    return filter_plants(plants_path, filters)


@app.get("/plants/{name}", response_model=PlantRecord)
def get_plant(name: str, plants_path: Path = Depends(get_plants_path)):
    return find_plant(plants_path, name)


# ---------- Complaints & newsletter ----------

@app.post("/complaint", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def complaint(request: Request, data: ComplaintRequest, db: Database = Depends(get_db)):
    submit_complaint(db, data)
    return {"message": "Your response has been received. Thank you!"}


@app.post("/newsletter/subscribe", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def newsletter_subscribe(request: Request, data: NewsletterRequest, db: Database = Depends(get_db)):
    subscribe(db, str(data.email))
    return {"message": "Thank you for subscribing to our newsletter!"}


@app.post("/newsletter/unsubscribe")
def newsletter_unsubscribe(data: NewsletterRequest, db: Database = Depends(get_db)):
    unsubscribe(db, str(data.email))
    return {"message": "You have been unsubscribed."}
