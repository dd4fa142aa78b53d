"""
Two clients talking through a running server

Usage:
    python run_api.py
    python scripts/chat_demo.py
"""
import asyncio
import httpx

from realtime_chat.client import ChatClient

BASE_URL = "http://localhost:8000"


async def ensure_user(username: str):
    async with httpx.AsyncClient(base_url=BASE_URL) as http:
        response = await http.get(f"/users/{username}")
        if response.status_code == 404:
            await http.post("/users/register", json={
                "username": username,
                "email": f"{username}@example.com"
            })


async def main():
    for name in ("alice", "bob"):
        await ensure_user(name)

    async with ChatClient(BASE_URL, "alice") as alice, ChatClient(BASE_URL, "bob") as bob:
        history = await bob.fetch_history()
        print(f"📜 bob loaded {len(history)} messages")

        listener = asyncio.create_task(bob.listen())

        await alice.notifier.keystroke()
        await asyncio.sleep(0.2)
        print(f"✏️  bob sees: {bob.typing.describe()}")

        sent = await alice.send("hello bob")
        await asyncio.sleep(0.2)
        print(f"📨 alice sent #{sent['id']}, bob has {len(bob.feed)} messages")
        print(f"✏️  bob sees: {bob.typing.describe() or 'nobody typing'}")

        listener.cancel()


if __name__ == "__main__":
    asyncio.run(main())
