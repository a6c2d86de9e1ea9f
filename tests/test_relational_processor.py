import pytest

from subject_router.core.exceptions import BackendError, ConfigurationError, RateLimitedError
from subject_router.schemas.reference import ReferenceDescriptor, ReferenceType
from subject_router.services.relational_processor import (
    UNABLE_TO_PROCESS,
    extract_sql,
    field_cache_key,
    split_reference,
)
from subject_router.services.session_store import ChatHistory

INVOICES = ReferenceDescriptor(subject="Invoices", type=ReferenceType.RELATIONAL, reference="dbo.Invoices")
CONNECTION = "sqlite+aiosqlite:///sales.db"


def test_extract_sql_from_fenced_block():
    assert extract_sql("```sql SELECT 1```") == "SELECT 1"
    assert extract_sql("Here you go:\n```sql\nSELECT *\nFROM dbo.Invoices\n```\nDone.") == "SELECT * FROM dbo.Invoices"


def test_extract_sql_collapses_crlf_line_endings():
    assert extract_sql("```sql\r\nSELECT *\r\nFROM dbo.Invoices\r\n```") == "SELECT * FROM dbo.Invoices"


def test_extract_sql_without_block_uses_whole_reply():
    assert extract_sql("SELECT COUNT(*) FROM dbo.Invoices") == "SELECT COUNT(*) FROM dbo.Invoices"


def test_extract_sql_takes_first_block():
    assert extract_sql("```SQL\nSELECT 1\n``` and ```sql SELECT 2```") == "SELECT 1"


def test_split_reference():
    assert split_reference("dbo.Invoices") == ("dbo", "Invoices")
    with pytest.raises(ConfigurationError):
        split_reference("Invoices")


@pytest.mark.asyncio
async def test_happy_path_returns_readable_answer(relational_processor, language_model, sql_driver, field_cache):
    language_model.replies = ["```sql\nSELECT * FROM dbo.Invoices\n```", "Acme has invoice 1."]
    history = ChatHistory()

    reply = await relational_processor.process(INVOICES, history, CONNECTION, "Which invoices exist?")

    assert reply == "Acme has invoice 1."
    assert sql_driver.describe_calls == [(CONNECTION, "dbo", "Invoices")]
    assert sql_driver.executed == [(CONNECTION, "SELECT * FROM dbo.Invoices")]
    assert field_cache.get(field_cache_key("Invoices", "dbo", "Invoices")) == sql_driver.fields
    assert [m["role"] for m in history] == ["user", "assistant", "user", "assistant"]
    assert "Which invoices exist?" in history.messages[0]["content"]
    assert "1, Acme" in history.messages[2]["content"]


@pytest.mark.asyncio
async def test_field_metadata_memoized_for_24_hours(relational_processor, language_model, sql_driver, clock):
    language_model.replies = ["SELECT 1", "one", "SELECT 1", "one", "SELECT 1", "one"]

    await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")
    clock.advance(hours=23)
    await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")
    assert len(sql_driver.describe_calls) == 1

    clock.advance(hours=1)
    await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")
    assert len(sql_driver.describe_calls) == 2


@pytest.mark.asyncio
async def test_empty_result_returns_no_result_response(relational_processor, language_model, sql_driver, templates):
    language_model.replies = ["SELECT * FROM dbo.Invoices WHERE 1 = 0"]
    sql_driver.data = ""

    reply = await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")

    assert reply == templates.get("responses", "no_result")
    assert len(language_model.calls) == 1


@pytest.mark.asyncio
async def test_execution_failure_is_contained(relational_processor, language_model, sql_driver):
    language_model.replies = ["SELECT nonsense"]
    sql_driver.data = BackendError("syntax error")

    reply = await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")

    assert reply == UNABLE_TO_PROCESS


@pytest.mark.asyncio
async def test_rate_limit_propagates(relational_processor, language_model):
    language_model.replies = ["SELECT 1", RateLimitedError("429")]

    with pytest.raises(RateLimitedError):
        await relational_processor.process(INVOICES, ChatHistory(), CONNECTION, "q")
