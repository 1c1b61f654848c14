import logging

from fastapi import Depends, FastAPI, Response
from fastapi.responses import JSONResponse

from . import config
from .metrics import scrape_metrics
from .orchestrator import ReportOrchestrator, run_report
from .schemas import ReportTrigger, RunResult, RunStatus

config.configure_logging()
LOG = logging.getLogger(__name__)

app = FastAPI(title="Cost Report API", version="1.0.0")


def get_orchestrator() -> ReportOrchestrator:
    return ReportOrchestrator()


def get_checkpoints():
    # None lets run_report pick the configured store for the execution id
    return None


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.post("/api/reports", response_model=RunResult)
def trigger_report(trigger: ReportTrigger,
                   orchestrator: ReportOrchestrator = Depends(get_orchestrator),
                   checkpoints=Depends(get_checkpoints)):
    result = run_report(trigger.type, trigger.execution_id, orchestrator=orchestrator, checkpoints=checkpoints)
    if result.status is RunStatus.FAILED:
        return JSONResponse(status_code=400, content=result.model_dump(mode="json"))
    return result


@app.get("/metrics")
def metrics():
    output, ctype = scrape_metrics()
    return Response(content=output, media_type=ctype)
