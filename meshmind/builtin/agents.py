"""
Built-in stock-market agents and the client tools that reach them.

Call graph
----------
stock market info app
    └── callDataCombineAgent ─▶ data combine agent
                                    ├── CallQuarterlyResultsAgent ─▶ quarterly results agent
                                    └── callDatabaseAgent ─────────▶ database agent

Each leaf agent owns local tools; each combining agent only holds
pass-through peer tools. Every agent is reachable over ``POST /agent``.
"""

import copy
import logging
from typing import Optional

from ..agent.core import Agent
from ..agent.llm import LLMClient
from ..app import MeshMindApp
from ..config import AgentConfig
from ..peer.client import PeerClient, peer_handler
from ..tools.registry import ToolRegistry
from ..tools.schema import message_tool
from .market_data import MarketDatabase, register_market_data_tools
from .quarterly_results import QuarterlyResultsStore, register_quarterly_results_tools

logger = logging.getLogger(__name__)


# ============================================================
# System Prompts
# ============================================================

DATABASE_AGENT_PROMPT = """
You are an AI agent that can perform SQLite database queries.
You have access to the underlying database through the query and command tools.
The database contains daily nasdaq stock market data, one table per ticker.
You MUST use the tools to help answer the request and return the result.
"""

QUARTERLY_RESULTS_AGENT_PROMPT = """
You are an AI agent that retrieve a stock ticker's quarterly results.
You must use the tools to help answer the request and return the result.
"""

DATA_COMBINE_AGENT_PROMPT = """
You are an AI agent that can process and answer requests on nasdaq companies.
You have access to underlying agent tools that can perform the following actions:
* Get the daily nasdaq stock market data for open, close, high, low.
* Get a company quarterly results release with their financial data.
Based on the request, think about how to approach this problem, then act by performing necessary actions (like calling tools), and finally observe the results to refine your understanding and provide a final answer
You can call the tools multiple times to get the answer to the request.
You can call the same tool multiple times to get the answer to the request.
When you know the final answer, you must start the response with the words 'Final Answer:'
"""

STOCK_MARKET_INFO_PROMPT = """
You are an AI agent that can respond to natural language requests for stock market data information.
You have access to underlying agent tools that can perform the following actions:
* Take compound requests and use the tools it has access to for result generation.
* Get the daily nasdaq stock market data for open, close, high, low.
* Get a company quarterly results release with their financial data.
Based on the request, think about how to approach this problem, then act by performing necessary actions (like calling tools), and finally observe the results to refine your understanding and provide a final answer
You can call the tools multiple times to get the answer to the request.
You can call the same tool multiple times to get the answer to the request.
When you know the final answer, you must start the response with the words 'Final Answer:'
"""


# ============================================================
# Client Tools (for other agents)
# ============================================================

CALL_DATABASE_AGENT_TOOL = message_tool(
    "callDatabaseAgent",
    "Make a request to the database agent. The agent will perform the requested query and return the result.",
    "The natural language request message for the database agent",
)

CALL_QUARTERLY_RESULTS_AGENT_TOOL = message_tool(
    "CallQuarterlyResultsAgent",
    "Make a request to the quarterly results agent. The agent will extract the requested results file and return it.",
    "The natural language request message for the quarterly results agent",
)

CALL_DATA_COMBINE_AGENT_TOOL = message_tool(
    "callDataCombineAgent",
    "Make a request to the data combine agent. The agent will process the requested query using the tools it can access and return the combined result.",
    "The natural language request message for the data combine agent",
)

CALL_STOCK_MARKET_INFO_APP_TOOL = message_tool(
    "callStockMarketInfoApp",
    "Make a request to the stock market info app. The app will process the request and return the result.",
    "The natural language request message for the app",
)

# environment prefixes (<PREFIX>_HOSTNAME / <PREFIX>_PORT) of each served agent
DATABASE_AGENT_ENV = "DATABASE_AGENT"
QUARTERLY_RESULTS_AGENT_ENV = "QUARTERLY_RESULTS_AGENT"
DATA_COMBINE_AGENT_ENV = "DATA_COMBINE_AGENT"
STOCK_MARKET_INFO_APP_ENV = "STOCK_MARKET_INFO_APP"


def _with_defaults(config: AgentConfig, name: str, prompt: str) -> AgentConfig:
    config = copy.copy(config)
    if config.name == "agent":
        config.name = name
    if config.system_prompt is None:
        config.system_prompt = prompt
    return config


# ============================================================
# Leaf Agents
# ============================================================

def build_database_agent(
    config: AgentConfig,
    database: MarketDatabase,
    engine: Optional[LLMClient] = None,
) -> Agent:

    registry = ToolRegistry()
    handlers = register_market_data_tools(registry, database)

    return MeshMindApp.create(
        config=_with_defaults(config, "database", DATABASE_AGENT_PROMPT),
        registry=registry,
        handlers=handlers,
        engine=engine,
    )


def build_quarterly_results_agent(
    config: AgentConfig,
    store: QuarterlyResultsStore,
    engine: Optional[LLMClient] = None,
) -> Agent:

    registry = ToolRegistry()
    handlers = register_quarterly_results_tools(registry, store)

    return MeshMindApp.create(
        config=_with_defaults(config, "quarterly_results", QUARTERLY_RESULTS_AGENT_PROMPT),
        registry=registry,
        handlers=handlers,
        engine=engine,
    )


# ============================================================
# Combining Agents
# ============================================================

def build_data_combine_agent(
    config: AgentConfig,
    quarterly_results: PeerClient,
    database: PeerClient,
    engine: Optional[LLMClient] = None,
) -> Agent:

    registry = ToolRegistry([CALL_QUARTERLY_RESULTS_AGENT_TOOL, CALL_DATABASE_AGENT_TOOL])
    handlers = {
        CALL_QUARTERLY_RESULTS_AGENT_TOOL.name: peer_handler(
            quarterly_results, CALL_QUARTERLY_RESULTS_AGENT_TOOL.name
        ),
        CALL_DATABASE_AGENT_TOOL.name: peer_handler(database, CALL_DATABASE_AGENT_TOOL.name),
    }

    return MeshMindApp.create(
        config=_with_defaults(config, "data_combine", DATA_COMBINE_AGENT_PROMPT),
        registry=registry,
        handlers=handlers,
        engine=engine,
    )


def build_stock_market_info_agent(
    config: AgentConfig,
    data_combine: PeerClient,
    engine: Optional[LLMClient] = None,
) -> Agent:

    registry = ToolRegistry([CALL_DATA_COMBINE_AGENT_TOOL])
    handlers = {
        CALL_DATA_COMBINE_AGENT_TOOL.name: peer_handler(
            data_combine, CALL_DATA_COMBINE_AGENT_TOOL.name
        ),
    }

    return MeshMindApp.create(
        config=_with_defaults(config, "stock_market_info", STOCK_MARKET_INFO_PROMPT),
        registry=registry,
        handlers=handlers,
        engine=engine,
    )
