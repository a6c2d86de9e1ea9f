"""
Builds the service graph from configuration.

Every shared collaborator (caches, drivers, the language model client) is
created here once and handed to its consumers explicitly.
"""
from dataclasses import dataclass
from datetime import timedelta

from subject_router.core import config
from subject_router.schemas.reference import ReferenceType
from subject_router.services.cache import TTLCache
from subject_router.services.conversation_router import ConversationRouter
from subject_router.services.document_driver import DocumentDriver
from subject_router.services.document_processor import DocumentProcessor
from subject_router.services.embedder import SentenceTransformerEmbedder
from subject_router.services.llm_client import LanguageModelClient
from subject_router.services.memory_store import MemoryStore
from subject_router.services.reference_catalog import ReferenceCatalog
from subject_router.services.relational_processor import RelationalProcessor
from subject_router.services.session_store import SessionStore
from subject_router.services.sql_driver import SqlDriver
from subject_router.services.template_store import TemplateStore


@dataclass
class Services:
    catalog: ReferenceCatalog
    session_store: SessionStore
    field_cache: TTLCache
    templates: TemplateStore
    language_model: LanguageModelClient
    sql_driver: SqlDriver
    document_driver: DocumentDriver
    memory_store: MemoryStore
    router: ConversationRouter

    async def aclose(self):
        await self.sql_driver.dispose()


def build_services() -> Services:
    catalog = ReferenceCatalog.from_file(config.REFERENCE_DATA_FILE)
    session_store = SessionStore(ttl_hours=config.SESSION_TTL_HOURS)
    field_cache: TTLCache[str] = TTLCache(timedelta(hours=config.FIELD_CACHE_TTL_HOURS))
    templates = TemplateStore(config.TEMPLATES_DIR)

    language_model = LanguageModelClient(
        base_url=config.LLM_BASE_URL,
        model=config.LLM_MODEL,
        provider=config.LLM_PROVIDER,
        api_key=config.LLM_API_KEY,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
        timeout=config.LLM_TIMEOUT,
        top_k=config.TOP_K,
        api_version=config.LLM_API_VERSION
    )

    sql_driver = SqlDriver(read_only=True, echo=config.SQL_ECHO)
    document_driver = DocumentDriver()
    memory_store = MemoryStore(
        SentenceTransformerEmbedder(config.EMBEDDING_MODEL, device=config.DEVICE, normalize=config.NORMALIZE),
        chunk_size=config.CHUNK_SIZE,
        chunk_overlap=config.CHUNK_OVERLAP
    )

    processors = {
        ReferenceType.RELATIONAL: RelationalProcessor(language_model, templates, sql_driver, field_cache),
        ReferenceType.DOCUMENT: DocumentProcessor(language_model, templates, document_driver, memory_store),
    }
    router = ConversationRouter(catalog, session_store, language_model, templates, processors)

    return Services(
        catalog=catalog,
        session_store=session_store,
        field_cache=field_cache,
        templates=templates,
        language_model=language_model,
        sql_driver=sql_driver,
        document_driver=document_driver,
        memory_store=memory_store,
        router=router,
    )
