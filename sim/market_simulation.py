"""
Market simulation for the DSC protocol.

Opens a set of borrowers against wETH and wBTC, funds a liquidator bot, then
moves collateral prices randomly and reports how the system held up.
"""

import argparse

from stablecoin.config import load_config
from stablecoin.logging_setup import configure_logging
from stablecoin.protocol import StablecoinProtocol
from stablecoin.simulation import MarketSimulation


def build_parser():
    parser = argparse.ArgumentParser(description="Simulate the DSC protocol under random prices")
    parser.add_argument("--config", default=None, help="Path to a YAML protocol config")
    parser.add_argument("--days", type=int, default=30, help="Days to simulate (default: 30)")
    parser.add_argument("--volatility", type=float, default=0.03,
                        help="Daily price volatility (default: 0.03)")
    parser.add_argument("--borrowers", type=int, default=10, help="Number of borrowers (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--no-plot", action="store_true", help="Skip the result plots")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def run_market_simulation(args):
    configure_logging(args.log_level)
    config = load_config(args.config) if args.config else None
    sim = MarketSimulation(StablecoinProtocol(config), seed=args.seed)
    engine = sim.protocol.engine

    print("Opening borrower positions...")
    sim.open_positions(args.borrowers)
    for user in sim.borrowers:
        debt, value = engine.get_account_information(user)
        print(f"  {user[:10]}: ${value / 10**engine.get_usd_decimals():,.2f} collateral, "
              f"{debt / 10**sim.protocol.dsc.decimals():,.0f} DSC")

    print("\nFunding liquidator...")
    sim.fund_liquidator()
    print(f"  Liquidator holds {sim.protocol.dsc.balance_of(sim.liquidator) / 10**sim.protocol.dsc.decimals():,.0f} DSC")

    print(f"\nSimulating {args.days} days at {args.volatility:.1%} daily volatility...")
    results = sim.simulate_market_scenario(args.days, price_volatility=args.volatility,
                                           plot_results=not args.no_plot)

    print("\nSimulation Results:")
    for symbol, price in results["final_prices"].items():
        print(f"  {symbol} price: ${price:,.2f}")
    print(f"  Collateral value: ${results['final_collateral_value']:,.2f}")
    print(f"  DSC supply: {results['final_dsc_supply']:,.2f}")
    print(f"  Collateral ratio: {results['final_collateral_ratio']:.2f}")
    print(f"  Unhealthy accounts: {results['unhealthy_accounts']}")
    print(f"  Liquidations: {results['liquidations']} ({results['failed_liquidations']} failed)")


if __name__ == "__main__":
    run_market_simulation(build_parser().parse_args())
