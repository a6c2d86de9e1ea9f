import asyncio

import pytest

from subject_router.core.exceptions import BackendError, RateLimitedError
from subject_router.schemas.reference import ReferenceDescriptor, ReferenceType
from subject_router.services.relational_processor import UNABLE_TO_PROCESS
from subject_router.services.session_store import ChatHistory

HANDBOOK = ReferenceDescriptor(subject="Handbook", type=ReferenceType.DOCUMENT, reference="docs/handbook.pdf")


@pytest.mark.asyncio
async def test_first_turn_indexes_and_answers(document_processor, language_model, document_driver, memory_store):
    language_model.retrieval_replies = ["Nine o'clock."]
    history = ChatHistory()

    reply = await document_processor.process(HANDBOOK, history, "docs/handbook.pdf", "When does the office open?")

    assert reply == "Nine o'clock."
    assert document_driver.extract_calls == ["docs/handbook.pdf"]
    assert memory_store.saved == [("Handbook", "Handbook", document_driver.text)]
    assert language_model.retrievers["Handbook"] is memory_store
    assert language_model.retrieval_calls == [{
        "prompt": language_model.retrieval_calls[0]["prompt"],
        "input": "When does the office open?",
        "collection": "Handbook",
    }]
    assert [m["role"] for m in history] == ["system", "assistant"]


@pytest.mark.asyncio
async def test_indexing_is_idempotent(document_processor, language_model, document_driver, memory_store):
    language_model.retrieval_replies = ["a", "b"]

    await document_processor.process(HANDBOOK, ChatHistory(), "docs/handbook.pdf", "q1")
    await document_processor.process(HANDBOOK, ChatHistory(), "docs/handbook.pdf", "q2")

    assert len(document_driver.extract_calls) == 1
    assert len(memory_store.saved) == 1
    assert await document_processor.ensure_index(HANDBOOK, "docs/handbook.pdf") is False


@pytest.mark.asyncio
async def test_concurrent_first_turns_index_once(document_processor, document_driver):
    results = await asyncio.gather(
        document_processor.ensure_index(HANDBOOK, "docs/handbook.pdf"),
        document_processor.ensure_index(HANDBOOK, "docs/handbook.pdf"),
    )

    assert sorted(results) == [False, True]
    assert len(document_driver.extract_calls) == 1


@pytest.mark.asyncio
async def test_extraction_failure_leaves_subject_unindexed(document_processor, document_driver):
    document_driver.text = BackendError("missing file")

    reply = await document_processor.process(HANDBOOK, ChatHistory(), "docs/handbook.pdf", "q")

    assert reply == UNABLE_TO_PROCESS
    assert document_processor.is_indexed("Handbook") is False


@pytest.mark.asyncio
async def test_rate_limit_propagates(document_processor, language_model):
    language_model.retrieval_replies = [RateLimitedError("429")]

    with pytest.raises(RateLimitedError):
        await document_processor.process(HANDBOOK, ChatHistory(), "docs/handbook.pdf", "q")
