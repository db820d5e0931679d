"""
Bonding-curve / AMM price oracle.

Both phases price off a fixed constant-product invariant rather than the
pool's live k:

    BC:   implied_sol    = K_BC / (token_reserves / 1e6)
          price          = implied_sol / (token_reserves / 1e6) / 1e9

    AMM:  implied_tokens = K_AMM / sol_reserves
          price          = sol_reserves / implied_tokens / 1e9

Each branch is folded into one integer ratio and divided once, so inputs
above 2**53 lose no precision before the final float. Market cap always
uses TOTAL_SUPPLY_FOR_MARKET_CAP, not the pool's circulating supply.
"""

from ..config import LAMPORTS_PER_SOL, TOKEN_DECIMALS, TOTAL_SUPPLY_FOR_MARKET_CAP
from ..models import Phase, PricingResult

BC_K_CONST = 20_000_000_000 * 1_000_000_000
AMM_K_CONST = 36_000_000_000 * 450_000_000


def price_per_token(phase: Phase, token_reserves: int, sol_reserves: int) -> float:
    """Price in SOL per whole token. Zero when the relevant reserve is empty."""
    if phase is Phase.BC:
        if token_reserves <= 0:
            return 0.0
        # K / (t/1e6)^2 / 1e9
        return (BC_K_CONST * TOKEN_DECIMALS * TOKEN_DECIMALS) / (
            token_reserves * token_reserves * LAMPORTS_PER_SOL
        )
    if not sol_reserves or sol_reserves <= 0:
        return 0.0
    # s / (K / s) / 1e9
    return (sol_reserves * sol_reserves) / (AMM_K_CONST * LAMPORTS_PER_SOL)


def price(phase: Phase, token_reserves: int, sol_reserves: int) -> PricingResult:
    per_token = price_per_token(phase, token_reserves, sol_reserves)
    return PricingResult(
        price_per_token=per_token,
        market_cap_sol=per_token * TOTAL_SUPPLY_FOR_MARKET_CAP,
        total_supply=TOTAL_SUPPLY_FOR_MARKET_CAP,
        phase=phase,
    )
