#!/usr/bin/env python3
"""
haunted syllabus

A FastAPI application that reads course syllabi and documents and regenerates
them as long-form "haunted" study material using a local LLM.

To start the server:
    python main.py
"""

import sys
from pathlib import Path

# add the project root to python path so we can import the src package
sys.path.insert(0, str(Path(__file__).parent))

# start the fastapi server when this file is run
if __name__ == "__main__":
    import uvicorn
    # run the api app on port 8000 with auto-reload for development
    uvicorn.run("src.haunted.api:app", host="0.0.0.0", port=8000, reload=True)
