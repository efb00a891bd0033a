#!/usr/bin/env python
"""
Run the quotes API with uvicorn, reloading on code changes.

Usage:
    python scripts/run_api.py
    PORT=8000 python scripts/run_api.py
"""
import os
import subprocess
import sys
from pathlib import Path


def main():
    project_root = Path(__file__).parent.parent

    env = os.environ.copy()
    src_path = str(project_root / 'src')
    env['PYTHONPATH'] = os.pathsep.join(p for p in (src_path, env.get('PYTHONPATH')) if p)

    host = env.get('HOST', '127.0.0.1')
    port = env.get('PORT', '3333')
    cmd = [
        sys.executable, '-m', 'uvicorn',
        '--factory', 'rulequote.api.main:create_app',
        '--host', host,
        '--port', port,
        '--reload', '--reload-dir', src_path,
    ]
    print(f"Starting Rulequote API on http://{host}:{port}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
