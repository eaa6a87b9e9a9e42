#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Starts the API with auto-reload on http://localhost:8000 (docs at /docs).
"""
import os
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

import uvicorn  # noqa: E402

if __name__ == "__main__":
    uvicorn.run(
        "barberbook.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info",
    )
