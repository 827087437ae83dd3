"""
Knowledge Assistant - FastAPI Backend
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kb_assistant import __version__
from kb_assistant.config import get_settings
from kb_assistant.middleware.logging_middleware import LoggingMiddleware
from kb_assistant.routes import assistant, health, knowledge
from kb_assistant.routes.dependencies import get_assistant

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Flush background interaction logs before exit
    if get_assistant.cache_info().currsize:
        await get_assistant().drain()


app = FastAPI(
    title="Knowledge Assistant",
    description="Customer question answering over the knowledge base",
    version=__version__,
    lifespan=lifespan
)

# Middleware runs bottom-up: logging wraps the routes, CORS wraps logging
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(assistant.router)
app.include_router(knowledge.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"message": "Knowledge Assistant API", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
