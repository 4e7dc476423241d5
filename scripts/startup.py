#!/usr/bin/env python3
"""
Container startup script.
Runs migrations, creates the super admin if configured, then execs uvicorn.
"""

import os
import subprocess
import sys


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return success status."""
    print(f"\n=== {description} ===")
    try:
        subprocess.run(cmd, check=True)
        return True
    except subprocess.CalledProcessError as e:
        print(f"Warning: {description} failed with code {e.returncode}")
        return False


def main():
    print("\n" + "=" * 50)
    print("İ-EP.APP Startup Script")
    print("=" * 50)

    if not run_command(["alembic", "upgrade", "head"], "Running database migrations"):
        sys.exit(1)

    email = os.environ.get("SUPER_ADMIN_EMAIL", "").strip()
    password = os.environ.get("SUPER_ADMIN_PASSWORD", "").strip()

    if email and password:
        # Non-zero usually means the super admin already exists
        run_command(
            [
                sys.executable, "scripts/create_super_admin.py",
                "--email", email,
                "--password", password,
                "--first-name", os.environ.get("SUPER_ADMIN_FIRST_NAME", "Super").strip(),
                "--last-name", os.environ.get("SUPER_ADMIN_LAST_NAME", "Admin").strip(),
            ],
            "Creating Super Admin",
        )
    else:
        print("\nSkipping super admin creation (SUPER_ADMIN_EMAIL/PASSWORD not set)")

    port = os.environ.get("PORT", "8000")
    print(f"\n=== Starting uvicorn on port {port} ===\n")

    os.execvp("uvicorn", [
        "uvicorn",
        "iep.main:app",
        "--host", "0.0.0.0",
        "--port", port,
    ])


if __name__ == "__main__":
    main()
