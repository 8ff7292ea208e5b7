"""
FastAPI Backend for Indic Transliteration.

Provides REST API endpoints for word transliteration.

Run with:
    uvicorn api:app --reload --host 0.0.0.0 --port 8000
"""

import sys
import asyncio
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import config
from src.xlit.errors import (
    DictionaryMissing,
    InvalidInput,
    ModelLoadError,
    UnsupportedDirection,
    UnsupportedLanguage,
    XlitError,
)
from src.xlit.inference import Transliterator
from src.xlit.languages import SUPPORTED_LANGUAGES

# ============================================
# App Configuration
# ============================================

app = FastAPI(
    title="Indic Transliteration API",
    description="""
    **Romanized → Indic script transliteration**
    
    Converts a romanized word (e.g. `amma`) into ranked spellings in one of
    21 Indic scripts using a character-level encoder-decoder with beam
    search, optionally re-ranked with word frequency dictionaries.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ============================================
# Schemas
# ============================================

class TransliterateRequest(BaseModel):
    word: str
    lang_code: str = config.DEFAULT_TARGET_LANGUAGE
    count: int = Field(config.DEFAULT_COUNT, ge=1, le=50)
    rescore: Optional[bool] = None

class Candidate(BaseModel):
    word: str
    score: float

class TransliterateResponse(BaseModel):
    word: str
    lang_code: str
    candidates: List[Candidate]

class Language(BaseModel):
    code: str
    name: str

class HealthResponse(BaseModel):
    status: str
    model_loaded: bool
    rescoring: bool
    languages: int

# ============================================
# Session (Lazy Loading)
# ============================================

_transliterator: Optional[Transliterator] = None

def get_transliterator() -> Transliterator:
    global _transliterator
    if _transliterator is None:
        _transliterator = Transliterator(config=config.build_xlit_config())
    return _transliterator

def to_http_error(error: XlitError) -> HTTPException:
    """Map transliteration errors to HTTP status codes."""
    if isinstance(error, (InvalidInput, UnsupportedLanguage, UnsupportedDirection)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (ModelLoadError, DictionaryMissing)):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))

# ============================================
# API Endpoints
# ============================================

@app.get("/", tags=["Info"])
async def root():
    """API root - returns basic info."""
    return {
        "name": "Indic Transliteration API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health", response_model=HealthResponse, tags=["Info"])
async def health_check():
    """Check API health and model status."""
    transliterator = get_transliterator()
    
    return HealthResponse(
        status="healthy",
        model_loaded=transliterator.is_initialized,
        rescoring=transliterator.config.rescoring.enabled,
        languages=len(SUPPORTED_LANGUAGES)
    )

@app.get("/languages", response_model=List[Language], tags=["Info"])
async def list_languages():
    """List supported target languages."""
    return [
        Language(code=code, name=SUPPORTED_LANGUAGES[code])
        for code in Transliterator.get_supported_languages()
    ]

@app.post("/transliterate", response_model=TransliterateResponse, tags=["Transliteration"])
async def transliterate_word(request: TransliterateRequest):
    """
    Transliterate a single romanized word.
    
    - **word**: Romanized word (e.g. "amma")
    - **lang_code**: Target language code (default: hi)
    - **count**: Number of candidates to return
    - **rescore**: Force dictionary rescoring on/off
    """
    transliterator = get_transliterator()
    
    try:
        results = await asyncio.to_thread(
            transliterator.transliterate_scored,
            request.word,
            request.lang_code,
            request.count,
            request.rescore
        )
    except XlitError as e:
        raise to_http_error(e) from e
    
    return TransliterateResponse(
        word=request.word,
        lang_code=request.lang_code,
        candidates=[Candidate(word=r.word, score=r.score) for r in results]
    )

@app.on_event("shutdown")
async def shutdown_event():
    """Release the model on shutdown."""
    print("🛑 Shutting down...")
    if _transliterator is not None:
        _transliterator.dispose()

# ============================================
# Run with: uvicorn api:app --reload
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
