from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend.app.runner import solve_with_deadline
from nlsolver import settings
from nlsolver.complexity import estimate_complexity
from nlsolver.errors import SolveCancelled
from nlsolver.generator import generate_initial_guess, generate_system, make_rng
from nlsolver.verification import verify_solution

app = FastAPI(title="NonlinearSolver API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SolveRequest(BaseModel):
    equations: list[str]
    x0: Optional[list[float]] = None
    epsilon: Optional[float] = None
    method: Optional[str] = None
    max_iterations: Optional[int] = None
    seed: Optional[int] = None


class VerificationStep(BaseModel):
    step_number: int
    equation: str
    residual: float
    within_tolerance: bool


class SolveResponse(BaseModel):
    solution: list[float]
    iterations: int
    final_error: float
    converged: bool
    function_evaluations: int
    jacobian_evaluations: int
    method_used: str
    initial_guess: list[float]
    verification_steps: list[VerificationStep]
    validation_status: str


class GenerateRequest(BaseModel):
    n: int
    seed: Optional[int] = None


class GenerateResponse(BaseModel):
    equations: list[str]
    initial_guess: list[float]


class ComplexityRequest(BaseModel):
    n: int
    iterations: int
    method: str
    update_period: Optional[int] = None


class ComplexityResponse(BaseModel):
    system_size: int
    iterations: int
    method: str
    time_complexity: float
    time_notation: str
    estimated_operations: int
    space_complexity: float
    space_notation: str
    estimated_memory_bytes: int
    update_period: int


@app.post("/api/solve", response_model=SolveResponse)
def solve(req: SolveRequest):
    if not req.equations:
        raise HTTPException(status_code=400, detail="Equations cannot be empty.")

    defaults = settings.get_settings()
    epsilon = req.epsilon if req.epsilon is not None else defaults["epsilon"]
    method = req.method or defaults["method"]
    max_iterations = (req.max_iterations if req.max_iterations is not None
                      else defaults["max_iterations"])
    x0 = req.x0
    if x0 is None:
        x0 = generate_initial_guess(len(req.equations), make_rng(req.seed))

    try:
        result = solve_with_deadline(
            req.equations, x0, epsilon, method, max_iterations,
            timeout_seconds=float(defaults["timeout_seconds"]),
        )
        check = verify_solution(req.equations, result.solution, epsilon)
    except SolveCancelled as e:
        raise HTTPException(status_code=504, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")

    body = result.to_dict()
    body["initial_guess"] = [float(v) for v in x0]
    body["verification_steps"] = check["verification_steps"]
    body["validation_status"] = check["validation_status"]
    return body


@app.post("/api/generate", response_model=GenerateResponse)
def generate(req: GenerateRequest):
    rng = make_rng(req.seed)
    try:
        equations = generate_system(req.n, rng)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"equations": equations, "initial_guess": generate_initial_guess(req.n, rng)}


@app.post("/api/complexity", response_model=ComplexityResponse)
def complexity(req: ComplexityRequest):
    period = (req.update_period if req.update_period is not None
              else settings.get_settings()["update_period"])
    try:
        estimate = estimate_complexity(req.n, req.iterations, req.method, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return estimate.to_dict()
