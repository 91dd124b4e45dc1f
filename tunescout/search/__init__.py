"""Search backends and the match-and-rank engine behind them."""
