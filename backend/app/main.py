from typing import Literal, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security.api_key import APIKeyHeader
from pydantic import BaseModel, Field

from solver import config, engine, graph, linear, table
from solver.errors import MathDashError
from solver.logging_config import get_logger

logger = get_logger("api")

app = FastAPI(title="MathDash API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Subscription gate ───────────────────────────────────────────────────

SUBSCRIPTION_HEADER = "X-Subscription-Token"
subscription_header = APIKeyHeader(name=SUBSCRIPTION_HEADER, auto_error=False)


def require_subscription(token: Optional[str] = Security(subscription_header)) -> Optional[str]:
    """Let the request through when no tokens are configured or the token is known."""
    if not config.SUBSCRIPTION_TOKENS:
        return token
    if not token:
        raise HTTPException(status_code=403, detail="Subscription required.")
    if token not in config.SUBSCRIPTION_TOKENS:
        raise HTTPException(status_code=403, detail="Invalid subscription token.")
    return token


@app.exception_handler(MathDashError)
async def math_error_handler(request: Request, exc: MathDashError):
    logger.warning("%s rejected: %s", request.url.path, exc.message)
    content = {"detail": exc.message, "code": exc.code}
    row_index = getattr(exc, "row_index", None)
    if row_index is not None:
        content["row_index"] = row_index
    return JSONResponse(status_code=400, content=content)


def _run(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except (MathDashError, HTTPException):
        raise
    except Exception as e:
        logger.error("%s failed unexpectedly", fn.__name__, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")


# ── Request / response models ───────────────────────────────────────────

class EvaluateRequest(BaseModel):
    expression: str
    variables: dict[str, float] = Field(default_factory=dict)


class SolveRequest(BaseModel):
    equation: str
    variable: str = "x"


class DerivativeRequest(BaseModel):
    expression: str
    variable: str = "x"


class SimplifyRequest(BaseModel):
    expression: str


class IntegralRequest(BaseModel):
    expression: str
    variable: str = "x"
    lower: Union[float, str] = "0"
    upper: Union[float, str] = "1"


class SystemRequest(BaseModel):
    equations: str
    variables: list[str] = Field(default_factory=lambda: ["x", "y"])
    strategy: Literal["tokenize", "legacy"] = "tokenize"


class TableRequest(BaseModel):
    text: str
    delimiter: str = ","
    summary: bool = True
    column: Optional[str] = None


class ExportRequest(BaseModel):
    text: str
    delimiter: str = ","
    format: Literal["csv", "tsv"] = "csv"


class ChartRequest(BaseModel):
    mode: Literal["formula", "data", "table", "system"] = "formula"
    chart_type: Literal["line", "bar", "scatter"] = "line"
    formula: str = "x^2"
    x_values: str = "-10,-9,-8,-7,-6,-5,-4,-3,-2,-1,0,1,2,3,4,5,6,7,8,9,10"
    y_values: str = ""
    text: str = ""
    delimiter: str = ","
    equations: str = ""
    variables: list[str] = Field(default_factory=lambda: ["x", "y"])
    theme: Literal["dark", "light"] = "dark"


class MethodInfo(BaseModel):
    name: str
    description: str


class RunSummary(BaseModel):
    runtime_ms: float
    total_steps: int
    timestamp: str
    library: str


class ToolResponse(BaseModel):
    input: dict
    method: MethodInfo
    steps: list[str]
    final_answer: str
    result: dict
    summary: RunSummary


# ── Endpoints ───────────────────────────────────────────────────────────

@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.post("/api/evaluate", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def evaluate(req: EvaluateRequest):
    return _run(engine.run_evaluate, req.expression, req.variables)


@app.post("/api/solve", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def solve(req: SolveRequest):
    return _run(engine.run_solve, req.equation, req.variable)


@app.post("/api/derivative", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def derivative(req: DerivativeRequest):
    return _run(engine.run_derivative, req.expression, req.variable)


@app.post("/api/simplify", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def simplify(req: SimplifyRequest):
    return _run(engine.run_simplify, req.expression)


@app.post("/api/integrate", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def integrate(req: IntegralRequest):
    return _run(engine.run_integral, req.expression, req.variable, req.lower, req.upper)


@app.post("/api/system", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def system(req: SystemRequest):
    return _run(engine.run_system, req.equations, tuple(req.variables), req.strategy)


@app.post("/api/table", response_model=ToolResponse, dependencies=[Depends(require_subscription)])
def import_table(req: TableRequest):
    return _run(engine.run_table, req.text, req.delimiter, req.summary, req.column)


@app.post("/api/table/summary", dependencies=[Depends(require_subscription)])
def table_summary(req: TableRequest):
    parsed = _run(table.parse_table, req.text, req.delimiter)
    return _run(table.summarize, parsed, req.column).to_dict()


@app.post("/api/table/export", dependencies=[Depends(require_subscription)])
def table_export(req: ExportRequest):
    parsed = _run(table.parse_table, req.text, req.delimiter)
    if req.format == "tsv":
        return Response(content=table.to_tsv(parsed), media_type="text/tab-separated-values")
    return Response(
        content=table.to_csv(parsed),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="analysis_results.csv"'},
    )


def _chart_figure(req: ChartRequest):
    if req.mode == "formula":
        xs, ys = graph.series_from_formula(req.formula, req.x_values)
        return graph.build_chart(xs, ys, req.chart_type, theme=req.theme)
    if req.mode == "data":
        xs, ys = graph.series_from_values(req.x_values, req.y_values)
        return graph.build_chart(xs, ys, req.chart_type, theme=req.theme)
    if req.mode == "table":
        return graph.build_table_chart(table.parse_table(req.text, req.delimiter), req.theme)
    result = linear.solve_system(req.equations, tuple(req.variables))
    return graph.build_system_figure(result, req.theme)


@app.post("/api/chart", dependencies=[Depends(require_subscription)])
def chart(req: ChartRequest):
    fig = _run(_chart_figure, req)
    if fig is None:
        raise HTTPException(status_code=400, detail="Nothing to chart: need at least two columns and one row.")
    return Response(content=_run(graph.figure_to_png, fig), media_type="image/png")
