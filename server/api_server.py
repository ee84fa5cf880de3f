"""FastAPI application entry point for the knowledge-base answer engine."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from server.core.ChunkRetriever import ChunkRetriever
from server.core.QueryService import QueryService
from server.core.SearchLogger import SearchLogger
from server.dependencies.errors import register_exception_handlers
from server.routers.QueryRouter import router as query_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


def build_query_service(
    helper_config: HelperConfig,
    embed_client: EmbedClientInterface,
    rag_client: RAGClientInterface,
    llm_client: LLMClientInterface,
) -> QueryService:
    """Compose the query pipeline from already-instantiated clients."""
    return QueryService(
        helper_config=helper_config,
        embed_client=embed_client,
        retriever=ChunkRetriever(helper_config=helper_config, rag_client=rag_client),
        llm_client=llm_client,
        search_logger=SearchLogger(helper_config=helper_config, rag_client=rag_client),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    embed_client = EmbedClientManager(helper_config=app.state.helper_config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.helper_config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.helper_config).get_client()
    clients = [embed_client, rag_client, llm_client]

    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    logging.info(
        "All clients booted (embed=%s, rag=%s, llm=%s).",
        embed_client.get_engine_name(),
        rag_client.get_engine_name(),
        llm_client.get_engine_name(),
        color="green",
    )

    await check_connections(rag_client, llm_client)
    await ensure_search_log_collection(rag_client, embed_client.vector_size)

    app.state.query_service = build_query_service(
        helper_config=app.state.helper_config,
        embed_client=embed_client,
        rag_client=rag_client,
        llm_client=llm_client,
    )

    # while the app is running...
    yield

    # when the app shuts down, flush telemetry and close all client connections
    logging.info("Shutting down, closing all clients...")
    await app.state.query_service.search_logger.drain()
    for client in clients:
        await client.close()
    logging.info("All clients closed.")


async def check_connections(rag_client: RAGClientInterface, llm_client: LLMClientInterface) -> None:
    """Check connectivity to the vector store and the text-generation provider on startup.

    Raises:
        Exception: If a backend is not reachable, queries cannot be served without it.
    """
    result = await rag_client.do_healthcheck()
    if not result.is_success:
        raise Exception(
            f"RAG client '{rag_client.get_engine_name()}' is not reachable "
            f"(status {result.status_code}). Cannot serve queries."
        )

    result = await llm_client.do_healthcheck()
    if not result.is_success:
        raise Exception(
            f"LLM client '{llm_client.get_engine_name()}' is not reachable "
            f"(status {result.status_code}). Answers cannot be generated."
        )


async def ensure_search_log_collection(rag_client: RAGClientInterface, vector_size: int) -> None:
    """Create the search log collection if it does not exist yet. Failures are non-fatal."""
    collection = rag_client.get_search_log_collection()
    try:
        if not await rag_client.do_existence_check(collection):
            await rag_client.do_create_collection(collection, vector_size=vector_size)
            logging.info("Created search log collection %r.", collection)
    except Exception as e:
        logging.warning("Could not prepare search log collection %r: %s", collection, e)


app = FastAPI(
    title="kb_answer_engine",
    description=(
        "Knowledge-base retrieval and grounded answer synthesis. "
        "POST /kb/search returns similarity-ranked document chunks; "
        "POST /kb/answer returns an answer grounded in those chunks, with citations, "
        "a confidence level and the information gaps."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=HelperConfig(logger=logging).get_list_val("APP_CORS_ORIGINS", default=["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(query_router)


if __name__ == "__main__":
    import uvicorn

    logging.info("Starting kb_answer_engine API Server v%s on port 8000...", app_version)
    uvicorn.run(app, host="0.0.0.0", port=8000)
