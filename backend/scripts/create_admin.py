#!/usr/bin/env python3
"""
Create (or promote) an admin account in the configured DATABASE_URL and
print its credentials + a JWT.

Optional environment variables:
- ADMIN_FULL_NAME
- ADMIN_EMAIL
- ADMIN_PASSWORD

An existing account with ADMIN_EMAIL is granted the admin role instead of
being recreated.
"""
import asyncio
import os
import secrets
import sys

from sqlmodel import select

try:
    from civic_api.auth import create_access_token, create_user, get_roles, grant_role
    from civic_api.database import async_session_factory, init_db
    from civic_api.models import User
except Exception as e:
    print("Failed to import application modules:", e, file=sys.stderr)
    sys.exit(2)


async def main():
    full_name = os.environ.get("ADMIN_FULL_NAME", "Auto Admin")
    email = os.environ.get("ADMIN_EMAIL", f"admin-{secrets.token_hex(4)}@example.test").strip().lower()
    # Generated passwords always contain a digit to pass the strength check
    password = os.environ.get("ADMIN_PASSWORD") or f"{secrets.token_urlsafe(12)}9a"

    await init_db()
    async with async_session_factory() as session:
        existing = (await session.exec(select(User).where(User.email == email))).first()
        if existing:
            user = existing
            password = "<unchanged>"
        else:
            user = await create_user(session, email=email, password=password, full_name=full_name)
        await grant_role(session, user.id, "admin")
        roles = await get_roles(session, user.id)
        token = create_access_token(subject=user.id, roles=roles)

        print("ADMIN_READY")
        print(f"id: {user.id}")
        print(f"email: {user.email}")
        print(f"password: {password}")
        print(f"roles: {', '.join(roles)}")
        print(f"access_token: {token}")


if __name__ == "__main__":
    asyncio.run(main())
