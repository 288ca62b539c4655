from meshmind import AgentConfig
from meshmind.builtin.agents import (
    build_data_combine_agent,
    build_database_agent,
    build_quarterly_results_agent,
)
from meshmind.builtin.market_data import MarketDatabase, load_market_database
from meshmind.builtin.quarterly_results import QuarterlyResultsStore
from meshmind.peer import PeerClient, PeerServer

import logging
import os

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# --------------------------------
# Engine configuration
# --------------------------------

config = AgentConfig.from_env(llm_backend="ollama", model="llama3.1")

# --------------------------------
# Leaf agents
# --------------------------------

if os.getenv("LOAD_DB") == "true":
    load_market_database(os.environ["NASDAQ_DATA"], "nasdaq.db")

database_agent = build_database_agent(config, MarketDatabase("nasdaq.db"))
results_agent = build_quarterly_results_agent(
    config,
    QuarterlyResultsStore(os.getenv("RESULTS_DATA", "results/")),
)

database_server = PeerServer(database_agent, port=8101)
results_server = PeerServer(results_agent, port=8102)

database_server.start()
results_server.start()

# --------------------------------
# Combining agent (peers as tools)
# --------------------------------

combine_agent = build_data_combine_agent(
    config,
    quarterly_results=PeerClient(results_server.url),
    database=PeerClient(database_server.url),
)

# --------------------------------
# Run conversation
# --------------------------------

print("\n=== Conversation Start ===\n")

try:
    print(combine_agent.call_agent("what was Apple's highest close price in November 2024"))
    print(combine_agent.call_agent("summarize aapl quarterly results for q-4 2024"))
finally:
    results_server.stop()
    database_server.stop()

print("\n=== Conversation End ===\n")

# --------------------------------
# Inspect session
# --------------------------------

print("--- Session Turns ---")
for turn in combine_agent.session.turns:
    print(f"Texts={turn.reply.texts}, ToolCalls={[c.tool_name for c in turn.reply.tool_calls]}")
