"""
Document subjects: retrieval-augmented answers over an indexed file.

The first turn for a subject extracts the document text, stores it in the
memory store under the subject's collection and registers that collection as
a retriever on the language model. Later turns reuse the index.
"""
import asyncio
import logging
from typing import Dict

from subject_router.core.exceptions import RateLimitedError
from subject_router.schemas.reference import ReferenceDescriptor
from subject_router.services.relational_processor import UNABLE_TO_PROCESS
from subject_router.services.session_store import ChatHistory


class DocumentProcessor:
    def __init__(self, language_model, templates, document_driver, memory_store):
        self.language_model = language_model
        self.templates = templates
        self.document_driver = document_driver
        self.memory_store = memory_store
        self._index_locks: Dict[str, asyncio.Lock] = {}

    def is_indexed(self, subject: str) -> bool:
        return self.language_model.has_retriever(subject)

    async def ensure_index(self, descriptor: ReferenceDescriptor, connection: str) -> bool:
        """
        Index the subject's document unless already done.
        Returns True when this call built the index.
        """
        subject = descriptor.subject
        if self.is_indexed(subject):
            return False

        lock = self._index_locks.setdefault(subject, asyncio.Lock())
        async with lock:
            if self.is_indexed(subject):
                return False

            text = await self.document_driver.extract_text(connection)
            await self.memory_store.save_information(subject, id=subject, text=text)
            self.language_model.register_retriever(subject, self.memory_store)

        logging.info(f"[Document] Indexed {connection} for subject {subject}")
        return True

    async def process(
        self,
        descriptor: ReferenceDescriptor,
        history: ChatHistory,
        connection: str,
        query: str
    ) -> str:
        try:
            await self.ensure_index(descriptor, connection)

            prompt = self.templates.prompt("memory_content")
            history.add_system_message(prompt)

            reply = await self.language_model.complete_with_retrieval(
                prompt,
                input=query,
                collection=descriptor.subject
            )
            history.add_assistant_message(reply)
            return reply

        except RateLimitedError:
            raise
        except Exception as e:
            logging.error(f"[Document] Failed to answer for {descriptor.subject}: {e}", exc_info=True)
            return UNABLE_TO_PROCESS
