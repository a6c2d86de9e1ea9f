import asyncio
import locale
import platform
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version

from subject_router.schemas.reference import ReferenceType


def _version() -> str:
    try:
        return version("subject-router")
    except PackageNotFoundError:
        return "unknown"


async def check_health(catalog, sql_driver, document_driver, model_name: str) -> dict:
    """
    Report runtime details and whether each subject's backend is reachable.
    Relational subjects are probed through the SQL driver, document subjects
    by checking that their file exists.
    """
    probes = {
        ReferenceType.RELATIONAL: sql_driver.can_connect,
        ReferenceType.DOCUMENT: document_driver.can_connect,
    }

    descriptors = catalog.list_all()
    results = await asyncio.gather(
        *(probes[d.type](catalog.connection_string(d)) for d in descriptors)
    )
    sources = {d.subject: bool(ok) for d, ok in zip(descriptors, results)}

    return {
        "status": "healthy" if all(sources.values()) else "degraded",
        "version": _version(),
        "date_time": {
            "utc_now": datetime.now(timezone.utc).isoformat(),
            "local_now": datetime.now().isoformat(),
        },
        "locale": locale.getlocale()[0],
        "platform": platform.system(),
        "ai_model": model_name,
        "sources": sources,
    }
