"""
Maps domain exceptions to HTTP errors at the request boundary.
Every failure stays scoped to the request that raised it.
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from fplbotola.logging_config import get_logger
from fplbotola.services.errors import NotFoundError
from fplbotola.transfers import TransferRejected

logger = get_logger(__name__)


@contextmanager
def http_errors(operation: str) -> Iterator[None]:
    """
    not found -> 404; transfer rule -> 400 with reason; other validation or
    business rule (ValueError) -> 400; storage failure or anything unexpected -> 500
    with a short description only.
    """
    try:
        yield
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransferRejected as e:
        raise HTTPException(status_code=400, detail={"message": str(e), "reason": e.reason.value})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except sqlite3.Error:
        logger.exception("Storage failure during %s", operation)
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {operation} failed (storage unavailable)")
    except Exception:
        logger.exception("Unexpected failure during %s", operation)
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {operation} failed")
