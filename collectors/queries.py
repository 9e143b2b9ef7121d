"""GraphQL documents for the ledger, claim, market and question views.

Every document takes ``$limit``/``$offset`` so it can be driven by
``collectors.paginator``. Distinct-latest views rely on Hasura's
``distinct_on``, which requires the distinct columns to lead ``order_by``.
"""

_POSITION_FIELDS = """
      user_address
      market_address
      token_id
      current_quantity_hmr
      delta_quantity
      realized_pnl_hmr
      block_timestamp
      event_type
      outcome {
        outcome_stats(limit: 1, order_by: [{ block_timestamp: desc }]) {
          marginal_price_hmr
          payout_hmr
        }
      }
      question {
        question_resolves(limit: 1, order_by: { block_timestamp: desc }) {
          answer
          block_timestamp
        }
      }
"""

_CLAIM_FIELDS = """
      id
      user_address
      market_address
      quantity
      token_id
      block_timestamp
      collateral
"""

# --- Latest position per (user, market, token) ---

GET_LAST_POSITION = """
  query GetLastPosition($limit: Int!, $offset: Int!) {
    ledger(
      limit: $limit
      offset: $offset
      order_by: [
        { user_address: asc }
        { market_address: asc }
        { token_id: asc }
        { block_timestamp: desc }
      ]
      distinct_on: [user_address, market_address, token_id]
    ) {%s}
  }
""" % _POSITION_FIELDS

GET_LAST_POSITION_BY_WALLET = """
  query GetLastPositionByWallet($limit: Int!, $offset: Int!, $userAddress: String!) {
    ledger(
      limit: $limit
      offset: $offset
      where: { user_address: { _eq: $userAddress } }
      order_by: [
        { market_address: asc }
        { token_id: asc }
        { block_timestamp: desc }
      ]
      distinct_on: [market_address, token_id]
    ) {%s}
  }
""" % _POSITION_FIELDS

GET_LAST_POSITION_PNL = """
  query GetLastPositionPnl($limit: Int!, $offset: Int!) {
    ledger(
      limit: $limit
      offset: $offset
      order_by: [
        { user_address: asc }
        { market_address: asc }
        { token_id: asc }
        { block_timestamp: desc }
      ]
      distinct_on: [user_address, market_address, token_id]
    ) {
      user_address
      market_address
      token_id
      current_quantity_hmr
      realized_pnl_hmr
      block_timestamp
      event_type
    }
  }
"""

# --- Trades (volume / quantity leaderboard) ---

GET_TRADES = """
  query GetTrades($limit: Int!, $offset: Int!) {
    ledger(
      limit: $limit
      offset: $offset
      order_by: { id: asc }
      where: { event_type: { _neq: "finalise" } }
    ) {
      user_address
      market_address
      token_id
      delta_quantity_hmr
      delta_collateral_hmr
    }
  }
"""

# --- Claims ---

GET_MARKET_CLAIMS = """
  query GetMarketClaims($limit: Int!, $offset: Int!) {
    market_claim(
      limit: $limit
      offset: $offset
      order_by: { id: asc }
      where: { quantity: { _gt: "0" } }
    ) {%s}
  }
""" % _CLAIM_FIELDS

GET_MARKET_CLAIMS_BY_WALLET = """
  query GetMarketClaimsByWallet($limit: Int!, $offset: Int!, $userAddress: String!) {
    market_claim(
      limit: $limit
      offset: $offset
      order_by: { id: asc }
      where: {
        quantity: { _gt: "0" }
        user_address: { _eq: $userAddress }
      }
    ) {%s}
  }
""" % _CLAIM_FIELDS

# --- Market metrics ---

GET_UNRESOLVED_MARKETS = """
  query GetUnresolvedMarkets($limit: Int!, $offset: Int!) {
    question(
      limit: $limit
      offset: $offset
      where: { question_resolves: { answer: { _is_null: true } } }
      order_by: { id: asc }
    ) {
      id
      market_address
      title
      description
      outcomes {
        token_id
        outcome_stats(limit: 1, order_by: { block_timestamp: desc }) {
          marginal_price_hmr
          block_timestamp
        }
      }
    }
  }
"""

GET_MARKET_LIQUIDITY = """
  query GetMarketLiquidity($marketAddress: String!, $limit: Int!, $offset: Int!) {
    ledger(
      where: {
        market_address: { _eq: $marketAddress }
        event_type: { _neq: "finalise" }
      }
      limit: $limit
      offset: $offset
      order_by: { id: asc }
    ) {
      delta_collateral_hmr
    }
  }
"""

GET_MARKET_TOKEN_SUPPLY = """
  query GetMarketTokenSupply(
    $marketAddress: String!
    $tokenId: String!
    $limit: Int!
    $offset: Int!
  ) {
    ledger(
      where: { market_address: { _eq: $marketAddress }, token_id: { _eq: $tokenId } }
      limit: $limit
      offset: $offset
      order_by: [{ user_address: asc }, { block_timestamp: desc }]
      distinct_on: [user_address]
    ) {
      current_quantity_hmr
      user_address
    }
  }
"""

# --- Market catalog ---

GET_ALL_MARKETS = """
  query GetAllMarkets($limit: Int!, $offset: Int!) {
    ledger(
      limit: $limit
      offset: $offset
      order_by: [{ market_address: asc }, { block_timestamp: desc }]
      distinct_on: [market_address]
    ) {
      market_address
      block_timestamp
      question {
        question_text
        created_at
      }
    }
  }
"""
