"""
Relational subjects: natural language -> SQL -> prose.

Per turn:
1. Look up (or introspect and cache for 24h) the column list of the table
2. Ask the language model for a SQL statement and extract it from the reply
3. Execute it and ask the model to turn the rows into a readable answer

Backend failures never escape `process`; rate limiting does, so the router can
reset the requestor's history.
"""
import logging
import re
from typing import Tuple

from subject_router.core.exceptions import ConfigurationError, RateLimitedError
from subject_router.schemas.reference import ReferenceDescriptor
from subject_router.services.cache import TTLCache
from subject_router.services.session_store import ChatHistory

UNABLE_TO_PROCESS = "Unable to process your query."

_SQL_BLOCK_RE = re.compile(r"```sql(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_sql(reply: str) -> str:
    """
    Pull the statement out of the first ```sql fenced block.

    Without a fenced block the whole reply is taken as the query.
    """
    match = _SQL_BLOCK_RE.search(reply)
    if match:
        return " ".join(match.group(1).split())
    return reply


def split_reference(reference: str) -> Tuple[str, str]:
    parts = reference.split(".")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ConfigurationError(f"Relational reference '{reference}' must be in schema.table form.")
    return parts[0], parts[1]


def field_cache_key(subject: str, schema: str, table: str) -> str:
    return f"{subject}_{schema}_{table}_describe_columns"


class RelationalProcessor:
    def __init__(self, language_model, templates, sql_driver, field_cache: TTLCache):
        self.language_model = language_model
        self.templates = templates
        self.sql_driver = sql_driver
        self.field_cache = field_cache

    async def get_fields(self, descriptor: ReferenceDescriptor, connection: str) -> str:
        schema, table = split_reference(descriptor.reference)
        cache_key = field_cache_key(descriptor.subject, schema, table)

        fields = self.field_cache.get(cache_key)
        if fields is None:
            fields = await self.sql_driver.describe_columns(connection, schema, table)
            self.field_cache.set(cache_key, fields)
            logging.info(f"[Relational] Cached field metadata for {cache_key}")
        return fields

    async def process(
        self,
        descriptor: ReferenceDescriptor,
        history: ChatHistory,
        connection: str,
        query: str
    ) -> str:
        fields = await self.get_fields(descriptor, connection)

        history.add_user_message(self.templates.prompt("generate_sql", fields=fields, query=query))
        reply = await self.language_model.complete(history)
        history.add_assistant_message(reply)

        try:
            sql = extract_sql(reply)
            logging.info(f"[Relational] Executing generated query for {descriptor.subject}: {sql}")
            data = await self.sql_driver.execute(connection, sql)

            if not data or not data.strip():
                return self.templates.response("no_result")

            history.add_user_message(self.templates.prompt("make_data_readable", data=data, fields=fields))
            answer = await self.language_model.complete(history)
            history.add_assistant_message(answer)
            return answer

        except RateLimitedError:
            raise
        except Exception as e:
            logging.error(f"[Relational] Failed to answer for {descriptor.subject}: {e}", exc_info=True)
            return UNABLE_TO_PROCESS
