"""
Smoke test against a running review platform backend.

Registers a throwaway user, logs in with the issued PIN, creates, edits and
deletes a review, then logs out. Optionally checks admin access.

Usage:
    python scripts/smoke_test.py --name "Smoke Tester" [--admin-name NAME --admin-pin PIN]
"""

import argparse
import asyncio
import sys
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Load env vars
load_dotenv()

from reviewhub import Settings, create_client, setup_logging


async def run(args) -> int:
    settings = Settings.from_env()
    # Keep the smoke session away from the real one
    settings.session_file = str(Path(tempfile.mkdtemp()) / "session.json")
    setup_logging(settings.log_level, json=settings.log_json)

    async with create_client(settings) as client:
        print(f"Backend: {settings.api_url}")

        registration = await client.session.register(args.name)
        if not registration:
            print(f"❌ Register: {registration.error}")
            return 1
        print("✅ Registered, PIN issued")

        login = await client.session.login(args.name, registration.data.pin)
        if not login:
            print(f"❌ Login: {login.error}")
            return 1
        print(f"✅ Logged in as {client.session.user.full_name} ({client.session.user.role.value})")

        draft = {
            "book_title": "Smoke Signals",
            "author": "Test Author",
            "rating": 4,
            "genre": "Fiction",
            "review_text": "Created by the smoke test script.",
        }
        created = await client.gateway.create_review(draft)
        if not created:
            print(f"❌ Create review: {created.error}")
            return 1
        print(f"✅ Created review {created.data.id}")

        draft["rating"] = 5
        updated = await client.gateway.update_review(created.data.id, draft)
        print(f"{'✅' if updated else '❌'} Update review: {updated.error or updated.data.rating}")

        listed = await client.gateway.list_my_reviews()
        print(f"{'✅' if listed else '❌'} My reviews: {len(listed.data or [])}")

        deleted = await client.gateway.delete_review(created.data.id)
        print(f"{'✅' if deleted else '❌'} Delete review{': ' + deleted.error if deleted.error else ''}")

        await client.session.logout()
        print("✅ Logged out")

        if args.admin_name and args.admin_pin:
            admin = await client.session.login(args.admin_name, args.admin_pin, as_admin=True)
            if not admin:
                print(f"❌ Admin login: {admin.error}")
                return 1
            users = await client.gateway.list_users()
            print(f"{'✅' if users else '❌'} Admin users: {len(users.data or [])}")
            await client.session.logout()

    return 0


def main():
    parser = argparse.ArgumentParser(description="ReviewHub client smoke test")
    parser.add_argument("--name", default="Smoke Tester", help="Full name to register")
    parser.add_argument("--admin-name", help="Admin full name")
    parser.add_argument("--admin-pin", help="Admin PIN")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
