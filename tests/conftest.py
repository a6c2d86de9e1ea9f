from datetime import datetime, timedelta

import pytest

from subject_router.core import config
from subject_router.schemas.reference import ReferenceType
from subject_router.services.cache import TTLCache
from subject_router.services.conversation_router import ConversationRouter
from subject_router.services.document_processor import DocumentProcessor
from subject_router.services.reference_catalog import ReferenceCatalog
from subject_router.services.relational_processor import RelationalProcessor
from subject_router.services.session_store import SessionStore
from subject_router.services.template_store import TemplateStore


class FakeClock:
    def __init__(self, start: datetime = datetime(2026, 1, 1, 8, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeLanguageModel:
    """Returns scripted replies in order; exceptions in the script are raised."""

    def __init__(self, replies=None, retrieval_replies=None):
        self.replies = list(replies or [])
        self.retrieval_replies = list(retrieval_replies or [])
        self.calls = []
        self.retrieval_calls = []
        self.retrievers = {}
        self.model = "fake-model"

    def register_retriever(self, collection, retriever):
        self.retrievers[collection] = retriever

    def has_retriever(self, collection):
        return collection in self.retrievers

    async def complete(self, history, max_tokens=None):
        self.calls.append(history.messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def complete_with_retrieval(self, prompt, input, collection):
        self.retrieval_calls.append({"prompt": prompt, "input": input, "collection": collection})
        reply = self.retrieval_replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeSqlDriver:
    def __init__(self, fields="dbo.Invoices, InvoiceId\ndbo.Invoices, CustomerName", data="1, Acme"):
        self.fields = fields
        self.data = data
        self.describe_calls = []
        self.executed = []

    async def describe_columns(self, connection, schema, table):
        self.describe_calls.append((connection, schema, table))
        return self.fields

    async def execute(self, connection, query):
        self.executed.append((connection, query))
        if isinstance(self.data, Exception):
            raise self.data
        return self.data

    async def can_connect(self, connection):
        return True


class FakeDocumentDriver:
    def __init__(self, text="The office opens at nine. Parking is free for staff."):
        self.text = text
        self.extract_calls = []

    async def extract_text(self, path):
        self.extract_calls.append(path)
        if isinstance(self.text, Exception):
            raise self.text
        return self.text

    async def can_connect(self, path):
        return True


class FakeMemoryStore:
    def __init__(self):
        self.saved = []

    async def save_information(self, collection, id, text):
        self.saved.append((collection, id, text))
        return 1

    async def recall(self, collection, query, top_k=3):
        return [{"id": f"{c}_0", "document": t} for c, _, t in self.saved if c == collection][:top_k]


REFERENCE_DATA = {
    "subjects": [
        {"subject": "Invoices", "type": "sql", "reference": "dbo.Invoices", "connection": "Sales"},
        {"subject": "Handbook", "type": "pdf", "reference": "docs/handbook.pdf"},
    ],
    "connections": {"Sales": "sqlite+aiosqlite:///sales.db"},
}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def templates():
    return TemplateStore(config.TEMPLATES_DIR)


@pytest.fixture
def catalog():
    return ReferenceCatalog.from_dict(REFERENCE_DATA, environ={})


@pytest.fixture
def session_store(clock):
    return SessionStore(ttl_hours=12, clock=clock)


@pytest.fixture
def field_cache(clock):
    return TTLCache(timedelta(hours=24), clock=clock)


@pytest.fixture
def language_model():
    return FakeLanguageModel()


@pytest.fixture
def sql_driver():
    return FakeSqlDriver()


@pytest.fixture
def document_driver():
    return FakeDocumentDriver()


@pytest.fixture
def memory_store():
    return FakeMemoryStore()


@pytest.fixture
def relational_processor(language_model, templates, sql_driver, field_cache):
    return RelationalProcessor(language_model, templates, sql_driver, field_cache)


@pytest.fixture
def document_processor(language_model, templates, document_driver, memory_store):
    return DocumentProcessor(language_model, templates, document_driver, memory_store)


@pytest.fixture
def router(catalog, session_store, language_model, templates, relational_processor, document_processor):
    return ConversationRouter(
        catalog,
        session_store,
        language_model,
        templates,
        {
            ReferenceType.RELATIONAL: relational_processor,
            ReferenceType.DOCUMENT: document_processor,
        },
    )
