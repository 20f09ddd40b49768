"""
Portfolio and balances consistency against the live wallet API.

Scenario 1: each wallet's total matches its token holdings and its
tokens/stocks breakdown.
Scenario 2: the balances endpoint's net worth matches the individually
fetched wallets and its own per-wallet breakdown.
"""

import pytest

from wallet_recon.config import KNOWN_NETWORKS

from .support import configured_addresses, live

pytestmark = live

ADDRESSES = configured_addresses()


# =============================================================================
# Scenario 1: total portfolio value
# =============================================================================

@pytest.mark.parametrize("address", ADDRESSES)
async def test_calculated_token_total_matches_api_total(client, validator, live_config, scenario_log, address):
    portfolio = await client.fetch_portfolio(address, live_config.network)

    validator.log_summary("Portfolio Summary", {
        "Total Value": portfolio.total_value,
        "Tokens Value": portfolio.tokens_value,
        "Stocks Value": portfolio.stocks_value,
        "Number of tokens": str(len(portfolio.tokens)),
    })
    validator.check_token_total(portfolio)
    scenario_log.verify(f"Token total matches API total for {address}")


@pytest.mark.parametrize("address", ADDRESSES)
async def test_total_equals_tokens_plus_stocks(client, validator, live_config, scenario_log, address):
    portfolio = await client.fetch_portfolio(address, live_config.network)

    validator.check_value_breakdown(portfolio)
    scenario_log.verify(f"Total equals tokensValue + stocksValue for {address}")


# =============================================================================
# Scenario 2: balances endpoint
# =============================================================================

async def test_net_worth_matches_sum_of_portfolios(client, validator, live_config, scenario_log):
    portfolios = await client.fetch_multiple_portfolios(ADDRESSES, live_config.network)
    balances = await client.fetch_aggregate_balances(
        ADDRESSES, currency=live_config.currency, network=live_config.network,
    )

    validator.check_net_worth_vs_portfolios(balances, portfolios)
    scenario_log.verify("Net worth equals the sum of portfolio values")


async def test_net_worth_matches_sum_of_data_values(client, validator, live_config, scenario_log):
    balances = await client.fetch_aggregate_balances(
        ADDRESSES, currency=live_config.currency, network=live_config.network,
    )

    scenario_log.summary("Balances Response", {
        "Net Worth": f"${balances.net_worth:.2f}",
        "Number of wallets": balances.wallet_count,
    })
    validator.check_net_worth_vs_breakdown(balances)
    scenario_log.verify("Net worth equals the sum of data values")


# =============================================================================
# Cross-network
# =============================================================================

@pytest.mark.parametrize("network", KNOWN_NETWORKS)
async def test_portfolio_on_network(client, scenario_log, network):
    portfolio = await client.fetch_portfolio(ADDRESSES[0], network)

    assert portfolio.network == network
    assert portfolio.total_value >= 0
    scenario_log.info(f"Tokens found: {len(portfolio.tokens)}")
    scenario_log.verify(f"{network} network validated")


@pytest.mark.parametrize("network", KNOWN_NETWORKS)
async def test_balances_on_network(client, scenario_log, network):
    balances = await client.fetch_aggregate_balances([ADDRESSES[0]], network=network)

    # Net worth may legitimately be zero off mainnet
    assert balances.net_worth >= 0
    scenario_log.verify(f"{network} balances validated")
