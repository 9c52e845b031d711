#!/usr/bin/env python
"""
Development server runner with auto-reload enabled.
Run this for local development to enable hot-reload on file changes.
"""
import uvicorn
from pathlib import Path

if __name__ == "__main__":
    script_dir = Path(__file__).parent.absolute()
    reload_dirs = [str(script_dir / "smartleave")]

    print("Starting SmartLeave API development server with hot reload...")
    for dir_path in reload_dirs:
        print(f"   watching {dir_path}")

    uvicorn.run(
        "smartleave.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=reload_dirs,
        reload_includes=["*.py"],
        reload_excludes=["*.pyc", "__pycache__", "*.log", ".git", "venv", ".venv"],
        reload_delay=0.25,
        log_level="info",
    )
