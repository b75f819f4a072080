from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mezmurhub import __version__
from mezmurhub.core.config import load_config

app = FastAPI(title="MezmurHub Admin API", version=__version__)

# CORS: ALLOWED_ORIGINS env var overrides [web].allowed_origins
allowed_origins = load_config(create_missing=False).web.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from web.backend.routers import assets, auth, categories, songs, stats

app.include_router(auth.router, prefix="/api", tags=["auth"])
app.include_router(categories.router, prefix="/api", tags=["categories"])
app.include_router(songs.router, prefix="/api", tags=["songs"])
app.include_router(stats.router, prefix="/api", tags=["stats"])
app.include_router(assets.router, tags=["assets"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
