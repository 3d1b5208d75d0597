"""FastAPI application entry point for the document evaluation service."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.extract.plain.TextExtractorPlain import TextExtractorPlain
from shared.index.VectorIndexManager import VectorIndexManager
from shared.store.memory.KeyValueStoreMemory import KeyValueStoreMemory
from services.documents.DocumentService import DocumentService
from services.evaluation.EvaluationAgent import EvaluationAgent
from services.evaluation.ReasoningService import ReasoningService
from services.evaluation.RuleRegistry import RuleRegistry
from server.errors import register_exception_handlers
from server.routers.DocumentRouter import router as document_router
from server.routers.HealthRouter import router as health_router
from server.routers.RuleRouter import router as rule_router
from server.routers.SearchRouter import router as search_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.app_version = app_version
    app.state.helper_config = HelperConfig(logger=logging)
    helper_config = app.state.helper_config

    llm_client = LLMClientManager(helper_config=helper_config).get_client()
    logging.info("Booting LLM client...")
    await llm_client.boot()
    app.state.llm_client = llm_client

    app.state.vector_index = VectorIndexManager(helper_config=helper_config).get_index()
    app.state.rule_registry = RuleRegistry(helper_config=helper_config)
    reasoning_service = ReasoningService(helper_config=helper_config, llm_client=llm_client)
    evaluation_agent = EvaluationAgent(
        helper_config=helper_config,
        reasoning_service=reasoning_service,
        vector_index=app.state.vector_index,
        rule_registry=app.state.rule_registry,
    )
    app.state.document_service = DocumentService(
        helper_config=helper_config,
        reasoning_service=reasoning_service,
        vector_index=app.state.vector_index,
        store=KeyValueStoreMemory(helper_config=helper_config),
        evaluation_agent=evaluation_agent,
        extractors=[TextExtractorPlain()],
    )

    await check_connections(llm_client)

    # while the app is running...
    yield

    # when the app shuts down
    logging.info("Shutting down, closing LLM client...")
    await llm_client.close()
    logging.info("LLM client closed.")


def create_app(lifespan_handler=lifespan) -> FastAPI:
    """Build the FastAPI app with all routers and error handlers registered.

    Args:
        lifespan_handler: Startup/shutdown context; tests pass None and set
            app.state themselves.
    """
    app = FastAPI(
        title="doc_eval",
        description=(
            "Retrieval-augmented compliance review of uploaded documents. "
            "Documents are embedded and indexed on upload; POST /documents/{id}/evaluate "
            "checks them against the configured rules with an LLM and returns a "
            "calibrated verdict with its execution trace."
        ),
        version=app_version,
        lifespan=lifespan_handler,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(document_router)
    app.include_router(search_router)
    app.include_router(rule_router)
    app.include_router(health_router)
    return app


async def check_connections(llm_client: LLMClientInterface) -> None:
    """Check the LLM backend on startup.

    Raises:
        Exception: If the LLM backend is not reachable; neither embedding nor
            evaluation can work without it.
    """
    result: httpx.Response = await llm_client.do_healthcheck()
    if not result.is_success:
        raise Exception(
            f"LLM client is not reachable (status {result.status_code}). "
            "Embedding and evaluation will not work."
        )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting doc_eval API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
