"""FastAPI application entry point."""

import logging
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from pydantic import BaseModel, Field

from .config import Settings, settings
from .controller import StorybookController
from ..domain.entities import OperationResult, UserSession
from ..domain.services import (
    AuthService,
    IntervalGate,
    LibraryService,
    PageCollectionManager,
    StoryGenerator,
    StorybookService,
    TranslationService,
)
from ..infrastructure import (
    DynamoDBStorybookRepository,
    DynamoDBUserRepository,
    LiteLLMTranslationProvider,
    LocalAssetStorage,
    LocalStorybookRepository,
    LocalUserRepository,
    MockTranslationProvider,
    S3AssetStorage,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_cursor": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
    "too_many_pages": status.HTTP_409_CONFLICT,
    "index_out_of_range": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_input": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_asset": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "session_closed": status.HTTP_401_UNAUTHORIZED,
    "provider_error": status.HTTP_502_BAD_GATEWAY,
    "partial_failure": status.HTTP_502_BAD_GATEWAY,
}


def create_controller(config: Settings) -> StorybookController:
    """Wire repositories, storage and the provider according to ``config``."""
    if config.backend == "aws":
        storybook_repository = DynamoDBStorybookRepository(config.storybooks_table_name, config.aws_region)
        user_repository = DynamoDBUserRepository(config.users_table_name, config.aws_region)
        asset_storage = S3AssetStorage(config.assets_bucket_name, config.aws_region)
    else:
        storybook_repository = LocalStorybookRepository()
        user_repository = LocalUserRepository()
        asset_storage = LocalAssetStorage()

    if config.translation_provider == "litellm":
        provider = LiteLLMTranslationProvider(
            model=config.llm_model,
            api_key=config.llm_api_key,
            timeout=config.llm_timeout_seconds,
        )
    else:
        provider = MockTranslationProvider()

    page_manager = PageCollectionManager(
        storybook_repository,
        asset_storage,
        user_repository=user_repository,
        max_pages=config.max_pages_per_book,
        max_write_attempts=config.max_write_attempts,
    )
    return StorybookController(
        auth_service=AuthService(user_repository),
        library_service=LibraryService(storybook_repository, page_size=config.library_page_size),
        storybook_service=StorybookService(
            storybook_repository,
            asset_storage,
            user_repository=user_repository,
            max_write_attempts=config.max_write_attempts,
        ),
        page_manager=page_manager,
        translation_service=TranslationService(
            page_manager,
            provider,
            gate=IntervalGate(config.translation_interval_seconds),
        ),
        story_generator=StoryGenerator(provider),
    )


# Create FastAPI app instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

controller = create_controller(settings)


def get_controller() -> StorybookController:
    return controller


def decode_token(token: str, config: Settings = settings) -> dict:
    """Verify a bearer token and return its claims.

    Raises:
        JWTError: If the signature, expiry or audience is invalid.
    """
    options = {"verify_aud": config.jwt_audience is not None}
    return jwt.decode(
        token,
        config.jwt_secret,
        algorithms=[config.jwt_algorithm],
        audience=config.jwt_audience,
        options=options,
    )


async def get_session(
    authorization: Optional[str] = Header(None),
    storybooks: StorybookController = Depends(get_controller),
) -> AsyncIterator[UserSession]:
    """Sign the caller in for the duration of one request."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        claims = decode_token(authorization.split(" ", 1)[1])
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if not claims.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no subject")

    session = await storybooks.auth_service.sign_in(
        claims["sub"],
        email=claims.get("email", ""),
        display_name=claims.get("name"),
        photo_url=claims.get("picture"),
    )
    try:
        yield session
    finally:
        storybooks.auth_service.sign_out(session)


def respond(result: OperationResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Serialize an operation result with a status code matching its outcome."""
    code = success_status if result.success else ERROR_STATUS.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))


class CreateStorybookRequest(BaseModel):
    title: str
    description: Optional[str] = None
    language: str = "en"


class AddPageRequest(BaseModel):
    image_url: str = ""
    text: str = ""
    insert_at_order: Optional[int] = None


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class GenerateStoryRequest(BaseModel):
    prompt: str = Field(min_length=1)
    language: str = "en"


@app.get("/health")
async def health_check(storybooks: StorybookController = Depends(get_controller)):
    """Health check endpoint."""
    return storybooks.get_health_status()


@app.get("/languages")
async def list_languages(storybooks: StorybookController = Depends(get_controller)):
    return respond(storybooks.list_languages())


@app.patch("/me")
async def update_profile(
    fields: dict,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.update_profile(session, fields))


@app.get("/library")
async def get_library(
    search: str = Query("", description="Case-insensitive title substring"),
    sort_by: str = Query("recent", description="recent, title or popular"),
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    """First page of the caller's library."""
    return respond(await storybooks.fetch_library(session, search, sort_by))


@app.get("/library/more")
async def get_more_library(
    cursor: str = Query(..., description="Cursor returned by the previous page"),
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    """Next page of the caller's library; a 409 means start over from /library."""
    return respond(await storybooks.load_more(session, cursor))


@app.post("/storybooks")
async def create_storybook(
    request: CreateStorybookRequest,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    result = await storybooks.create_storybook(session, request.title, request.description, request.language)
    return respond(result, status.HTTP_201_CREATED)


@app.get("/storybooks/{storybook_id}")
async def get_storybook(
    storybook_id: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.fetch_storybook(session, storybook_id))


@app.patch("/storybooks/{storybook_id}")
async def update_storybook(
    storybook_id: str,
    fields: dict,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.update_storybook(session, storybook_id, fields))


@app.delete("/storybooks/{storybook_id}")
async def delete_storybook(
    storybook_id: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.delete_storybook(session, storybook_id))


@app.post("/storybooks/{storybook_id}/reads")
async def record_read(
    storybook_id: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.record_read(session, storybook_id))


@app.post("/storybooks/{storybook_id}/cover")
async def upload_cover(
    storybook_id: str,
    image: UploadFile = File(...),
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    data = await image.read()
    return respond(await storybooks.upload_cover_image(session, storybook_id, data, image.content_type or ""))


@app.post("/storybooks/{storybook_id}/images")
async def upload_page_image(
    storybook_id: str,
    image: UploadFile = File(...),
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    data = await image.read()
    result = await storybooks.upload_page_image(session, storybook_id, data, image.content_type or "")
    return respond(result, status.HTTP_201_CREATED)


@app.get("/storybooks/{storybook_id}/pages")
async def get_pages(
    storybook_id: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.fetch_pages(session, storybook_id))


@app.post("/storybooks/{storybook_id}/pages")
async def add_page(
    storybook_id: str,
    request: AddPageRequest,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    result = await storybooks.add_page(
        session, storybook_id, request.image_url, request.text, request.insert_at_order
    )
    return respond(result, status.HTTP_201_CREATED)


@app.post("/storybooks/{storybook_id}/pages/reorder")
async def reorder_pages(
    storybook_id: str,
    request: ReorderRequest,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.reorder_page(session, storybook_id, request.from_index, request.to_index))


@app.patch("/storybooks/{storybook_id}/pages/{page_id}")
async def update_page(
    storybook_id: str,
    page_id: str,
    fields: dict,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.update_page(session, storybook_id, page_id, fields))


@app.delete("/storybooks/{storybook_id}/pages/{page_id}")
async def delete_page(
    storybook_id: str,
    page_id: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.delete_page(session, storybook_id, page_id))


@app.get("/storybooks/{storybook_id}/pages/{page_id}/translations/{language}")
async def get_page_translation(
    storybook_id: str,
    page_id: str,
    language: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    """Text to display or read aloud, falling back to the original text."""
    return respond(await storybooks.get_page_translation(session, storybook_id, page_id, language))


@app.post("/storybooks/{storybook_id}/pages/{page_id}/translations/{language}")
async def translate_page(
    storybook_id: str,
    page_id: str,
    language: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.translate_page(session, storybook_id, page_id, language))


@app.post("/storybooks/{storybook_id}/translations/{language}")
async def translate_storybook(
    storybook_id: str,
    language: str,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    """Translate every page still missing ``language``; safe to re-run after a partial failure."""
    return respond(await storybooks.translate_all_pages(session, storybook_id, language))


@app.post("/stories/generate")
async def generate_story(
    request: GenerateStoryRequest,
    session: UserSession = Depends(get_session),
    storybooks: StorybookController = Depends(get_controller),
):
    return respond(await storybooks.generate_story(session, request.prompt, request.language))
