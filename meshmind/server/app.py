"""
Process entry point: build one built-in agent from the environment and
serve it at ``POST /agent``.

    MESHMIND_AGENT=database python -m meshmind.server.app

Environment
-----------
MESHMIND_AGENT              database | quarterly_results | data_combine | stock_market_info
MESHMIND_LLM_BACKEND, ...   engine configuration (see AgentConfig.from_env)
<AGENT>_HOSTNAME/_PORT      listen address of the served agent, and the
                            address other agents use to reach it
MARKET_DB_PATH              SQLite market database (default: nasdaq.db)
LOAD_DB=true                rebuild the market database from NASDAQ_DATA first
RESULTS_DATA                root directory of the quarterly results releases
"""

import logging
import os
import sys
from typing import Callable, Dict, Mapping, Optional

from meshmind.agent.core import Agent
from meshmind.builtin.agents import (
    DATA_COMBINE_AGENT_ENV,
    DATABASE_AGENT_ENV,
    QUARTERLY_RESULTS_AGENT_ENV,
    STOCK_MARKET_INFO_APP_ENV,
    build_data_combine_agent,
    build_database_agent,
    build_quarterly_results_agent,
    build_stock_market_info_agent,
)
from meshmind.builtin.market_data import MarketDatabase, load_market_database
from meshmind.builtin.quarterly_results import QuarterlyResultsStore
from meshmind.config import AgentConfig
from meshmind.peer.client import PeerClient
from meshmind.peer.server import PeerServer

logger = logging.getLogger("meshmind.server")


# ============================================================
# Agent Builders
# ============================================================

def _database(config: AgentConfig, env: Mapping[str, str]) -> Agent:
    db_path = env.get("MARKET_DB_PATH", "nasdaq.db")

    if env.get("LOAD_DB") == "true":
        data_dir = env.get("NASDAQ_DATA")
        if not data_dir:
            raise RuntimeError("no NASDAQ_DATA in env vars")
        loaded = load_market_database(data_dir, db_path)
        logger.info("[SERVER] Market database loaded | tickers=%d", len(loaded))

    return build_database_agent(config, MarketDatabase(db_path))


def _quarterly_results(config: AgentConfig, env: Mapping[str, str]) -> Agent:
    root = env.get("RESULTS_DATA")
    if not root:
        raise RuntimeError("environment variable RESULTS_DATA not set")

    return build_quarterly_results_agent(config, QuarterlyResultsStore(root))


def _data_combine(config: AgentConfig, env: Mapping[str, str]) -> Agent:
    return build_data_combine_agent(
        config,
        quarterly_results=PeerClient.from_env(QUARTERLY_RESULTS_AGENT_ENV, env),
        database=PeerClient.from_env(DATABASE_AGENT_ENV, env),
    )


def _stock_market_info(config: AgentConfig, env: Mapping[str, str]) -> Agent:
    return build_stock_market_info_agent(
        config,
        data_combine=PeerClient.from_env(DATA_COMBINE_AGENT_ENV, env),
    )


AGENTS: Dict[str, tuple] = {
    "database": (_database, DATABASE_AGENT_ENV),
    "quarterly_results": (_quarterly_results, QUARTERLY_RESULTS_AGENT_ENV),
    "data_combine": (_data_combine, DATA_COMBINE_AGENT_ENV),
    "stock_market_info": (_stock_market_info, STOCK_MARKET_INFO_APP_ENV),
}


def build_server_from_env(environ: Optional[Mapping[str, str]] = None) -> PeerServer:

    env = os.environ if environ is None else environ

    kind = env.get("MESHMIND_AGENT")
    if kind not in AGENTS:
        raise ValueError(
            f"MESHMIND_AGENT must be one of {sorted(AGENTS)}, got {kind!r}"
        )

    builder: Callable[[AgentConfig, Mapping[str, str]], Agent]
    builder, prefix = AGENTS[kind]

    hostname = env.get(f"{prefix}_HOSTNAME")
    port = env.get(f"{prefix}_PORT")
    if not hostname or not port:
        raise RuntimeError(f"missing {prefix}_HOSTNAME or {prefix}_PORT in env vars")

    config = AgentConfig.from_env(environ=env, name=kind)
    logger.info("[SERVER] Building agent | %r", config)

    agent = builder(config, env)

    return PeerServer(agent, host=hostname, port=int(port), log_level="info")


# ============================================================
# Main
# ============================================================

def main() -> int:

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    try:
        server = build_server_from_env()
    except (ValueError, RuntimeError, FileNotFoundError) as e:
        logger.error("[SERVER] Startup failed: %s", e)
        return 1

    logger.info("[SERVER] agent running at: %s", server.url)
    server.serve_forever()

    return 0


if __name__ == "__main__":
    sys.exit(main())
