"""Example for the asyncio client."""

import asyncio

from replitdb import AsyncClient


async def run() -> None:
    """Write a few keys concurrently and list them."""
    async with AsyncClient.from_environment() as client:
        await asyncio.gather(*(client.set(f"async-{index}", str(index)) for index in range(5)))
        print("keys:", await client.list_keys("async-"))
        await asyncio.gather(*(client.delete(f"async-{index}") for index in range(5)))


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
