#!/usr/bin/env python3
"""
Smoke-check a running API with the tenant-aware client.

Logs in, then reads health, assignment statistics, attendance statistics and
the student list, printing the outcome and error category of each call.

Usage:
    python scripts/check_api.py --email mudur@ataturkozel.k12.tr --password password123
    python scripts/check_api.py --token <access token> --tenant-id <uuid>
"""

import argparse
import asyncio
import logging
import sys

import httpx

from iep.client import (
    APIResult,
    AssignmentAPIClient,
    AttendanceAPIClient,
    ClientSession,
    SystemAPIClient,
    TenantAPIClient,
    static_session,
    user_message,
)
from iep.config import settings


async def login(base_url: str, email: str, password: str, subdomain: str | None) -> str:
    async with httpx.AsyncClient(base_url=base_url, timeout=settings.api_timeout_ms / 1000) as http:
        response = await http.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password, "tenant_subdomain": subdomain},
        )
        response.raise_for_status()
        return response.json()["data"]["access_token"]


def report(name: str, result: APIResult) -> bool:
    if result.success:
        print(f"  OK    {name} ({result.status}, {result.response_time_ms}ms, {result.retry_count} retries)")
        return True
    error = result.error
    print(f"  FAIL  {name} ({result.status}) {error.type.value}: {error.message}")
    print(f"        {user_message(error)}")
    return False


async def run_checks(base_url: str, session: ClientSession) -> bool:
    async with TenantAPIClient(base_url=base_url, session_provider=static_session(session)) as api:
        system = SystemAPIClient(api)
        checks = [
            ("health", system.get_health()),
            ("assignment statistics", AssignmentAPIClient(api).get_statistics()),
            ("attendance statistics", AttendanceAPIClient(api).get_statistics()),
            ("students", system.get_students(page_size=5)),
        ]
        outcomes = [report(name, await call) for name, call in checks]
    return all(outcomes)


async def main():
    parser = argparse.ArgumentParser(description="Smoke-check the İ-EP.APP API")
    parser.add_argument("--base-url", default=settings.api_base_url)
    parser.add_argument("--email", "-e")
    parser.add_argument("--password", "-p")
    parser.add_argument("--subdomain", help="School subdomain, when the email exists in several schools")
    parser.add_argument("--token", help="Existing access token instead of logging in")
    parser.add_argument("--tenant-id", help="Tenant to act on (required for super admin tokens)")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.CRITICAL)

    token = args.token
    if not token:
        if not (args.email and args.password):
            parser.error("either --token or --email and --password are required")
        try:
            token = await login(args.base_url, args.email, args.password, args.subdomain)
        except httpx.HTTPError as e:
            print(f"Login failed: {e}")
            sys.exit(1)

    try:
        session = ClientSession.from_access_token(token, tenant_id=args.tenant_id)
    except ValueError as e:
        print(str(e))
        sys.exit(1)

    print(f"\nChecking {args.base_url} as {session.email or session.user_id} (tenant {session.tenant_id})\n")
    sys.exit(0 if await run_checks(args.base_url, session) else 1)


if __name__ == "__main__":
    asyncio.run(main())
