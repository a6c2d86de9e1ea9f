"""
Conversation router: classify each query into a subject and dispatch it.

Turn lifecycle:
- Fetch or create the requestor's history (refreshing its 12h expiry)
- Ask the language model which registered subject the query concerns
- Unclassified queries get a free-form reply straight from the model
- Classified queries go to the processor registered for the subject's type

`converse` never raises. Rate limiting resets the requestor's history and
asks them to retry; every other failure becomes a generic reply.
"""
import logging
from typing import Dict, List

from subject_router.core.exceptions import NotFoundError, RateLimitedError
from subject_router.schemas.reference import ReferenceType
from subject_router.services.classifier import parse_classification
from subject_router.services.relational_processor import UNABLE_TO_PROCESS
from subject_router.services.template_store import PROMPTS, RESPONSES

RATE_LIMITED = "Please enter your query in 1 min.\n{error}"


class ConversationRouter:
    def __init__(self, catalog, session_store, language_model, templates, processors: Dict[ReferenceType, object]):
        self.catalog = catalog
        self.session_store = session_store
        self.language_model = language_model
        self.templates = templates
        self.processors = dict(processors)

    def get_subjects(self) -> List[str]:
        return self.catalog.subjects()

    def get_prompt(self, key: str) -> str:
        return self.templates.get(PROMPTS, key)

    def get_response(self, key: str) -> str:
        return self.templates.get(RESPONSES, key)

    async def classify(self, history, subjects: List[str], query: str):
        subject_list = ", ".join(subjects)
        history.add_system_message(self.templates.prompt("context", subjects=subject_list))
        history.add_user_message(self.templates.prompt("is_classified", subjects=subject_list, query=query))

        reply = await self.language_model.complete(history)
        subject = parse_classification(reply, subjects)
        logging.info(f"[Router] Classification reply '{reply}' -> {subject or 'unclassified'}")
        return subject

    async def converse(self, query: str, requestor: str) -> str:
        subjects = self.get_subjects()
        history = self.session_store.get_or_create(requestor)

        try:
            subject = await self.classify(history, subjects, query)

            if subject is None:
                history.add_user_message(self.templates.prompt("not_classified", query=query))
                reply = await self.language_model.complete(history)
                history.add_assistant_message(reply)
                return reply

            descriptor, connection = self.catalog.resolve(subject)
            processor = self.processors.get(descriptor.type)
            if processor is None:
                logging.error(f"[Router] No processor registered for type {descriptor.type.value}")
                return UNABLE_TO_PROCESS

            return await processor.process(descriptor, history, connection, query)

        except RateLimitedError as e:
            self.session_store.reset(requestor)
            return RATE_LIMITED.format(error=e)
        except NotFoundError as e:
            logging.warning(f"[Router] {e}")
            return UNABLE_TO_PROCESS
        except Exception as e:
            logging.error(f"[Router] Failed to process query for {requestor}: {e}", exc_info=True)
            return UNABLE_TO_PROCESS
