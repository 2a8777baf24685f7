from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import FastAPI

from .lib.engine import AIRecommendationEngine
from .lib.profiles import ElasticsearchProfileRepository
from .routers import health
from .settings import get_elasticsearch_api_key, get_elasticsearch_url


@asynccontextmanager
async def lifespan(app: FastAPI):
    # In-process callers reach the engine through `app.state.engine`.
    es_kwargs = {}
    api_key = get_elasticsearch_api_key()
    if api_key:
        es_kwargs["api_key"] = api_key
    es = AsyncElasticsearch(get_elasticsearch_url(), **es_kwargs)
    repository = ElasticsearchProfileRepository(es)
    app.state.es = es
    app.state.repository = repository
    app.state.engine = AIRecommendationEngine(repository)
    try:
        yield
    finally:
        app.state.engine = None
        app.state.repository = None
        app.state.es = None
        await es.close()


app = FastAPI(
    title="Pro Match Recommender",
    description="Recommendation and ranking engine for professionals, clients and their posts",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)


@app.get("/")
async def root():
    return {"message": "Pro Match Recommender"}
