"""
Lambda handler for cycle status, configuration and predictions.

Routes:
    GET  /cycle/status
    GET  /cycle/predictions?count=3
    GET  /cycle/flow?month=YYYY-MM
    PUT  /cycle/configuration
    POST /cycle/shift
"""
from typing import Any, Dict
from datetime import date, datetime
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from mnemosyne.services.constants import DEFAULT_PREDICTION_COUNT
from mnemosyne.services.cycle import CycleModel
from mnemosyne.services.exceptions import InvalidConfigurationError
from mnemosyne.services.repository import DynamoMoodEntryRepository
from mnemosyne.utils.logging import logger

tracer = Tracer()

# Initialize shared repository (lazy loading)
_repository = None

def get_repository() -> DynamoMoodEntryRepository:
    """Get or create the entry repository."""
    global _repository
    if _repository is None:
        _repository = DynamoMoodEntryRepository()
    return _repository

def get_cycle_model(repository: DynamoMoodEntryRepository) -> CycleModel:
    """Build a cycle model from the stored configuration."""
    return CycleModel(repository, configuration=repository.load_configuration())

def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body)
    }

def _parse_body(event: Dict) -> Dict[str, Any]:
    body = event.get("body") or {}
    if isinstance(body, str):
        body = json.loads(body)
    return body

def get_status(model: CycleModel, event: Dict) -> Dict[str, Any]:
    return _response(200, model.current_status().model_dump(mode="json"))

def get_predictions(model: CycleModel, event: Dict) -> Dict[str, Any]:
    """List upcoming stop weeks with the average flow recorded in each."""
    query_params = event.get("queryStringParameters") or {}
    count = int(query_params.get("count", DEFAULT_PREDICTION_COUNT))
    predictions = model.predict_stop_weeks(count=count)
    return _response(200, {
        "configured": model.is_configured,
        "stop_weeks": [
            {
                **interval.model_dump(mode="json"),
                "average_flow_intensity": model.average_flow_intensity(interval)
            }
            for interval in predictions
        ]
    })

def get_flow(model: CycleModel, event: Dict) -> Dict[str, Any]:
    """Flow per day for the requested month, defaulting to this month."""
    query_params = event.get("queryStringParameters") or {}
    month = query_params.get("month")
    reference = datetime.strptime(month, "%Y-%m").date() if month else model.today()
    history = model.flow_history(reference)
    return _response(200, {
        "month": reference.strftime("%Y-%m"),
        "flow": {day.isoformat(): flow.value for day, flow in sorted(history.items())}
    })

def put_configuration(model: CycleModel, event: Dict) -> Dict[str, Any]:
    """Create or replace the cycle configuration and store it."""
    body = _parse_body(event)
    status = model.configure(
        pill_brand=body.get("pill_brand", ""),
        cycle_length=int(body["cycle_length"]),
        stop_week_start=int(body["stop_week_start"]),
        stop_week_end=int(body["stop_week_end"]),
        cycle_start_date=date.fromisoformat(body["cycle_start_date"])
    )
    get_repository().save_configuration(model.configuration)
    return _response(200, status.model_dump(mode="json"))

def post_shift(model: CycleModel, event: Dict) -> Dict[str, Any]:
    """Shift the cycle start after a forgotten pill and store it."""
    body = _parse_body(event)
    shift_all_future = body.get("shift_all_future", True)
    if not isinstance(shift_all_future, bool):
        raise ValueError("shift_all_future must be a JSON boolean")
    status = model.shift_cycle_start(int(body["days"]), shift_all_future=shift_all_future)
    if model.is_configured:
        get_repository().save_configuration(model.configuration)
    return _response(200, status.model_dump(mode="json"))

ROUTES = {
    ("GET", "/cycle/status"): get_status,
    ("GET", "/cycle/predictions"): get_predictions,
    ("GET", "/cycle/flow"): get_flow,
    ("PUT", "/cycle/configuration"): put_configuration,
    ("POST", "/cycle/shift"): post_shift,
}

@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle a cycle request.

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    method = event.get("httpMethod", "GET")
    path = event.get("path", "")
    route = ROUTES.get((method, path))
    if route is None:
        return _response(404, {"error": f"No route for {method} {path}"})

    try:
        model = get_cycle_model(get_repository())
        return route(model, event)

    except InvalidConfigurationError as e:
        logger.warning("Rejected cycle configuration", extra={"error": str(e)})
        return _response(400, {"error": str(e)})

    except (KeyError, ValueError) as e:
        logger.warning("Invalid cycle request", extra={
            "error": str(e),
            "error_type": e.__class__.__name__,
            "path": path
        })
        return _response(400, {"error": f"Invalid request: {e}"})

    except Exception as e:
        logger.exception("Error handling cycle request", extra={
            "error": str(e),
            "error_type": e.__class__.__name__,
            "path": path
        })
        return _response(500, {"error": "Internal error"})
