"""
Built-in stock-market agents: market database, quarterly results, and
the combining agents that reach them over the peer layer.
"""
