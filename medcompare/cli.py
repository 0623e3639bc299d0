"""medcompare - compare medicine listings across pharmacy sites.

Simple CLI that runs every enabled source for one keyword.
"""

import argparse
import asyncio
import json
import signal
import sys

from medcompare.config import SOURCE_IDS
from medcompare.errors import InputError
from medcompare.services.browser import BrowserManager
from medcompare.services.orchestrator import RetrievalOrchestrator


def install_shutdown_signals(task: asyncio.Task) -> None:
    """Cancel ``task`` on SIGINT/SIGTERM so its scoped teardown runs once."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except (NotImplementedError, RuntimeError):
            # add_signal_handler is unavailable on Windows event loops.
            pass


async def run_all(keyword: str, only: list[str] | None = None) -> dict:
    """Run all (or only the named) sources and return the response payload."""
    install_shutdown_signals(asyncio.current_task())
    enabled = {source: source in only for source in SOURCE_IDS} if only else None

    async with BrowserManager() as manager:
        orchestrator = RetrievalOrchestrator(manager)
        response = await orchestrator.run(keyword, enabled=enabled)

    print("Summary counts:")
    for source, count in response.counts().items():
        print(f"  {source}: {count}")
    print(f"  durationMs: {response.duration_ms}")
    return {
        "keyword": response.keyword,
        "durationMs": response.duration_ms,
        **response.to_payload(),
    }


def main():
    parser = argparse.ArgumentParser(description="Compare medicine listings across pharmacy sites")
    parser.add_argument("keyword", nargs="?", default="paracetamol", help="Search keyword")
    parser.add_argument(
        "--only",
        nargs="+",
        choices=SOURCE_IDS,
        help="Run only these sources",
    )
    parser.add_argument("--json", action="store_true", help="Print the detailed JSON summary")
    args = parser.parse_args()

    try:
        summary = asyncio.run(run_all(args.keyword, args.only))
    except InputError as exc:
        print(f"Runner error: {exc}", file=sys.stderr)
        sys.exit(1)
    except asyncio.CancelledError:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)

    if args.json:
        print("\nDetailed summary:\n")
        print(json.dumps(summary, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
