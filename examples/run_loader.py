"""Load the example batches and log their lifecycle events.

Usage::

    python examples/run_loader.py
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from modloader import LoadBatch, LoggingObserver, ModuleLoader, get_default_channel, load_loader_configs

HERE = Path(__file__).resolve().parent


async def main() -> None:
    channel = get_default_channel()
    LoggingObserver().attach(channel)

    loader = ModuleLoader(channel=channel)
    results = await loader.register_many(load_loader_configs(HERE / "loaders.yaml"))
    await channel.join()

    for result in results:
        if isinstance(result, LoadBatch):
            print(f"{result.request_name}: {', '.join(result.component_names) or '(none)'}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())
