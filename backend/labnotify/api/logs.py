import logging
from collections import deque
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

router = APIRouter()

EXPORT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class RecentLogBuffer(logging.Handler):
    """Ring buffer of recent records behind the operator log view.

    Records are kept as-is so the view can filter on the numeric level and
    the export can reuse the handler's formatter.
    """

    def __init__(self, capacity: int = 2000):
        super().__init__()
        self.buffer: deque = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter(EXPORT_FORMAT))

    def emit(self, record: logging.LogRecord):
        self.buffer.append(record)

    def select(self, min_level: int = logging.NOTSET, logger_prefix: Optional[str] = None) -> List[logging.LogRecord]:
        return [
            r for r in self.buffer
            if r.levelno >= min_level and (not logger_prefix or r.name.startswith(logger_prefix))
        ]

    @staticmethod
    def as_entry(record: logging.LogRecord) -> dict:
        return {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }


log_handler = RecentLogBuffer()


def install_log_handler():
    root = logging.getLogger()
    if log_handler not in root.handlers:
        root.addHandler(log_handler)


def _min_level(level: Optional[str]) -> int:
    if not level:
        return logging.NOTSET
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise HTTPException(status_code=400, detail=f"Unknown log level: {level}")
    return value


@router.get("/logs")
async def get_logs(
    level: Optional[str] = None,
    logger_name: Optional[str] = None,
    limit: int = Query(default=500, ge=1, le=2000),
    offset: int = Query(default=0, ge=0),
):
    """Newest first. ``level`` is a minimum (``warning`` includes errors);
    ``logger_name=labnotify.services`` narrows to dispatch and channel activity."""
    records = log_handler.select(_min_level(level), logger_name)
    page = records[::-1][offset:offset + limit]
    return {"items": [log_handler.as_entry(r) for r in page], "total": len(records)}


@router.get("/logs/export")
async def export_logs(level: Optional[str] = None, logger_name: Optional[str] = None):
    records = log_handler.select(_min_level(level), logger_name)
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return PlainTextResponse(
        "\n".join(log_handler.format(r) for r in records),
        headers={"Content-Disposition": f"attachment; filename=labnotify-logs-{stamp}.txt"},
    )
