"""Create the slot table and seed the pool; prints the resulting status counts."""

import sys

from src.slotmarket.config import load_config
from src.slotmarket.slots.slots_repository import SlotRepository


def main() -> int:
    config = load_config()
    counts = SlotRepository(config.session_factory).count_by_status()
    summary = ", ".join(f"{status}={count}" for status, count in sorted(counts.items()))
    print(f"database ready at {config.database_url}: {summary}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
