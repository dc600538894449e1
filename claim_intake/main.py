"""Main script for replaying webhook payloads through the claim pipeline."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .domain.errors import InvalidMessageError
from .domain.models.inbound_message import InboundMessage, extract_messages
from .infrastructure.dependencies import ServiceContainer


async def replay(paths: List[str], container: Optional[ServiceContainer] = None) -> int:
    """Route every message found in the given payload files.

    Args:
        paths: Webhook payload JSON files
        container: Service container; built from the environment if omitted

    Returns:
        Number of messages that could not be parsed
    """
    container = container or ServiceContainer()
    await container.start()
    skipped = 0

    try:
        for path in paths:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)

            for raw_message in extract_messages(payload):
                try:
                    message = InboundMessage.from_webhook(raw_message)
                except InvalidMessageError as e:
                    print(f"{path}: skipped malformed message: {e}", file=sys.stderr)
                    skipped += 1
                    continue

                outcome = await container.router.route(message)
                print(json.dumps(outcome.model_dump(mode="json")))

        print(f"\nClaims in store: {await container.store.count_claims()}")
    finally:
        await container.stop()

    return skipped


def main() -> None:
    """Run the replay CLI."""
    load_dotenv()
    parser = argparse.ArgumentParser(
        description="Replay WhatsApp webhook payload files through the claim pipeline"
    )
    parser.add_argument("payloads", nargs="+", help="JSON files holding webhook payloads")
    args = parser.parse_args()

    skipped = asyncio.run(replay(args.payloads))
    sys.exit(1 if skipped else 0)


if __name__ == "__main__":
    main()
