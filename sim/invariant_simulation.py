"""
Random-action run of the DSC protocol.

Performs a long sequence of deposits, mints, burns, redemptions and
liquidations by a few actors and stops at the first broken invariant.
"""

import argparse
import sys

from stablecoin.logging_setup import configure_logging
from stablecoin.simulation import InvariantHandler, InvariantViolation


def main():
    parser = argparse.ArgumentParser(description="Check DSC invariants under random actions")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--actors", type=int, default=3)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--volatility", type=float, default=0.0,
                        help="Per-step price volatility; 0 keeps prices fixed")
    parser.add_argument("--log-level", default="ERROR",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    configure_logging(args.log_level)
    handler = InvariantHandler(num_actors=args.actors, seed=args.seed, price_volatility=args.volatility)

    try:
        stats = handler.run(args.steps)
    except InvariantViolation as e:
        print(f"Invariant broken: {e}")
        sys.exit(1)

    print(f"Completed {args.steps} steps with all invariants holding\n")
    for action, s in stats.items():
        print(f"  {action:10s} attempted {s.attempted:5d}  succeeded {s.succeeded:5d}")
        for reason, count in sorted(s.rejected.items()):
            print(f"      {reason}: {count}")

    print(f"\n  Collateral value: {handler.protocol.total_collateral_value()}")
    print(f"  DSC value:        {handler.protocol.total_dsc_value()}")


if __name__ == "__main__":
    main()
