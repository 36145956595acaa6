from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .core import analyze_batch
from .preprocess import decode_base64_image, decode_image_bytes
from .types import AnalysisReport

MAX_IMAGES = 32

app = FastAPI(title="markpick API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class Base64SolveRequest(BaseModel):
    instruction: str = ""
    images: List[str] = Field(default_factory=list)


class RuleOut(BaseModel):
    kind: str
    target: Optional[int] = None
    subject: str
    text: str


class ImageResultOut(BaseModel):
    index: int
    total_shapes: int
    metric: int
    error: Optional[str] = None


class SolveResponse(BaseModel):
    rule: RuleOut
    selected_index: Optional[int] = None
    approximate: bool = False
    results: List[ImageResultOut]


def _check_count(n: int) -> None:
    if n == 0:
        raise HTTPException(status_code=400, detail="No images provided.")
    if n > MAX_IMAGES:
        raise HTTPException(status_code=400, detail=f"Too many images (max {MAX_IMAGES}).")


def _to_response(report: AnalysisReport) -> SolveResponse:
    return SolveResponse(**report.to_dict())


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/solve", response_model=SolveResponse)
def solve(
    files: List[UploadFile] = File(...),
    instruction: str = Form(""),
):
    _check_count(len(files))
    # undecodable uploads stay in place as None so indices line up
    images = [decode_image_bytes(f.file.read()) for f in files]
    return _to_response(analyze_batch(images, instruction))


@app.post("/solve/base64", response_model=SolveResponse)
def solve_base64(req: Base64SolveRequest):
    _check_count(len(req.images))
    images = [decode_base64_image(b64) for b64 in req.images]
    return _to_response(analyze_batch(images, req.instruction))
