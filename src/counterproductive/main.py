"""CounterProductive application entrypoint."""

import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from counterproductive.adapters.gist import GistPublisher
from counterproductive.analysis.parser import is_count
from counterproductive.config import settings
from counterproductive.errors import DeliveryError, MalformedRecord
from counterproductive.ingest.log_store import append_record, format_record, read_log
from counterproductive.pipeline import ReportResult, build_report, generate_report_file
from counterproductive.utils.logging import configure_logging

configure_logging(settings.log_level)
logger = logging.getLogger("counterproductive")

publisher = GistPublisher.from_config(settings.gist)

app = FastAPI(
    title="CounterProductive",
    description="Button press log analytics",
    version=settings.version,
)


class CountMessage(BaseModel):
    topic: str
    message: str


@app.on_event("startup")
async def startup():
    logger.info("CounterProductive v%s starting", settings.version)
    logger.info("Log level: %s", settings.log_level)
    logger.info("Topic: %s", settings.topic)
    logger.info("Log file: %s", settings.log_file)
    logger.info("Timezone: %s", settings.timezone_name)
    logger.info(
        "Gist delivery: %s", "enabled" if publisher.enabled else "disabled"
    )


@app.exception_handler(MalformedRecord)
async def malformed_record_handler(request: Request, exc: MalformedRecord):
    # Only reachable with strict parsing and a log edited outside the service
    logger.error(
        "Log file %s holds a malformed record: %s", settings.log_file, exc,
        extra={"line_number": exc.line_number, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "log file holds a malformed record",
            "line_number": exc.line_number,
            "reason": exc.reason,
        },
    )


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": settings.version,
        "publisher": publisher.health().state.value,
    }


# Plain def: FastAPI runs these in its threadpool, off the event loop
@app.get("/stats")
def stats():
    result = build_report(read_log(settings.log_file), settings)
    return result.snapshot.model_dump(mode="json")


@app.get("/report", response_class=HTMLResponse)
def report():
    result = build_report(read_log(settings.log_file), settings)
    return HTMLResponse(result.document.to_html())


def _record(line: str) -> ReportResult:
    append_record(settings.log_file, line)
    return generate_report_file(settings)


@app.post("/events")
async def submit_event(msg: CountMessage):
    logger.info(
        "Received message on topic: %s, Message: %s", msg.topic, msg.message,
        extra={"topic": msg.topic},
    )
    if msg.topic != settings.topic:
        logger.info("Ignoring message on different topic: %s", msg.topic)
        return {"accepted": False, "reason": "unexpected topic"}

    count = msg.message.strip()
    if not is_count(count):
        logger.warning(
            "Ignoring message that is not a count: %r", msg.message,
            extra={"topic": msg.topic},
        )
        return {"accepted": False, "reason": "message is not a count"}

    line = format_record(msg.topic, count, tz=settings.tz)
    result = await asyncio.to_thread(_record, line)

    delivered = False
    if publisher.enabled:
        try:
            await publisher.publish_report(result.document.to_html())
            snapshot = result.snapshot
            if snapshot.last_count is not None:
                await publisher.publish_counter(
                    snapshot.last_count, snapshot.last_event_at
                )
            delivered = True
        except DeliveryError as e:
            logger.error("Report delivery failed: %s", e)

    return {
        "accepted": True,
        "record": line,
        "status": result.snapshot.status.value,
        "delivered": delivered,
    }
