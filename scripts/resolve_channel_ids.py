#!/usr/bin/env python3
"""
Resolve channel names to channel IDs for the ``channelName`` list of a search config.

The fetcher scopes channel passes by channel ID. Each lookup is a search.list
call (100 quota units), so run this once and paste the output into the config.

Usage:
    python scripts/resolve_channel_ids.py "Channel One" "Channel Two"
"""

import asyncio
import sys

from ytharvest.core.errors import FetchError, QuotaExceededError
from ytharvest.services.utils import backoff_client
from ytharvest.services.youtube_client import search_channel_by_name


async def resolve(channel_names: list) -> list:
    results = []
    total = len(channel_names)

    async with backoff_client() as client:
        for idx, name in enumerate(channel_names, 1):
            print(f"[{idx}/{total}] searching: {name}... ", end='', flush=True, file=sys.stderr)
            try:
                channel_id = await search_channel_by_name(client, name)
            except QuotaExceededError as e:
                print(f"quota exceeded: {e}", file=sys.stderr)
                break
            except FetchError as e:
                print(f"error: {e}", file=sys.stderr)
                channel_id = None
            else:
                print(channel_id or "not found", file=sys.stderr)

            results.append({"name": name, "id": channel_id})
            await asyncio.sleep(0.5)

    return results


async def main(argv: list) -> int:
    if not argv:
        print(__doc__, file=sys.stderr)
        return 1

    results = await resolve(argv)

    print("channelName:")
    for item in results:
        if item["id"]:
            print(f'  - "{item["id"]}"  # {item["name"]}')
        else:
            print(f'  # NOT FOUND: {item["name"]}')

    found = sum(1 for item in results if item["id"])
    print(f"\n{found}/{len(argv)} channels resolved", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
