import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from .balances import infer_participants
from .config import ALLOWED_ORIGINS, LOG_LEVEL, TRACE_BUFFER_SIZE
from .models import (
    AuditEntry, AuditRequest, SettleAudit, SettleRequest, SettleResponse,
    SplitCheckResponse, Transaction, ValidateSettlementsRequest, ValidateSettlementsResponse,
)
from .service import InvalidSplitError, SettlementService, SettlementServiceError
from .split import split_amounts, validate_split
from .trace import TraceBuffer

logger = logging.getLogger(__name__)

trace_buffer = TraceBuffer(capacity=TRACE_BUFFER_SIZE)
package_logger = logging.getLogger("settlement")
package_logger.setLevel(LOG_LEVEL)
package_logger.addHandler(trace_buffer)

app = FastAPI(
    title="Settlement API",
    description="Turns shared expenses into net balances and a short list of transfers that settles them",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

settlement_service = SettlementService()


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "settlement"}


@app.post("/settle", response_model=SettleResponse, tags=["Settlements"])
def settle(request: SettleRequest) -> SettleResponse:
    logger.info("Settlement API called")
    participants = (
        request.all_participants if request.all_participants is not None
        else infer_participants(request.transactions)
    )
    try:
        if request.strict_splits:
            settlement_service.check_splits(request.transactions)
        result = settlement_service.compute_settlement(request.transactions, participants)
    except InvalidSplitError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": str(e),
                "issues": {tx_id: [i.model_dump(mode="json") for i in issues] for tx_id, issues in e.issues.items()},
            },
        )
    except SettlementServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SettleResponse(
        **dict(result),
        audit=SettleAudit(
            timestamp=datetime.now(timezone.utc),
            transaction_count=len(request.transactions),
            participant_count=len(participants),
            participants=participants,
        ),
    )


@app.post("/settlements/validate", response_model=ValidateSettlementsResponse, tags=["Settlements"])
def validate(request: ValidateSettlementsRequest) -> ValidateSettlementsResponse:
    return ValidateSettlementsResponse(
        valid=settlement_service.validate_settlements(request.balances, request.settlements)
    )


@app.post("/splits/validate", response_model=SplitCheckResponse, tags=["Splits"])
def check_split(transaction: Transaction) -> SplitCheckResponse:
    issues = validate_split(transaction)
    return SplitCheckResponse(valid=not issues, issues=issues, amounts=split_amounts(transaction))


@app.post("/audit", response_model=list[AuditEntry], tags=["Debug"])
def audit(request: AuditRequest) -> list[AuditEntry]:
    return settlement_service.audit_trail(request.transactions, request.all_participants)


@app.get("/debug/logs", tags=["Debug"])
def get_logs(category: Optional[str] = None) -> list[dict]:
    return trace_buffer.get_records(category)


@app.delete("/debug/logs", status_code=status.HTTP_204_NO_CONTENT, tags=["Debug"])
def clear_logs():
    trace_buffer.clear()


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
