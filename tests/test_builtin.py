import json

import pytest

from meshmind.builtin.agents import (
    DATABASE_AGENT_PROMPT,
    build_data_combine_agent,
    build_database_agent,
    build_quarterly_results_agent,
    build_stock_market_info_agent,
)
from meshmind.builtin.market_data import MarketDatabase, load_market_database
from meshmind.builtin.quarterly_results import QuarterlyResultsStore
from meshmind.config import AgentConfig
from meshmind.models import Reply
from meshmind.peer import PeerClient

from helpers import ScriptedEngine, call


AAPL_CSV = """,date,open,high,low,close
0,2024-10-31,229.3,229.8,225.3,225.9
1,2024-11-01,220.9,225.3,220.2,222.9
2,2024-11-04,220.9,222.7,219.7,222.0
3,2024-11-05,221.7
"""


@pytest.fixture
def market_db(tmp_path):
    data = tmp_path / "nasdaq"
    data.mkdir()
    (data / "aapl.csv").write_text(AAPL_CSV)
    (data / "notes.txt").write_text("just,three,columns\n1,2,3\n")

    db_path = tmp_path / "nasdaq.db"
    loaded = load_market_database(data, db_path)
    return MarketDatabase(db_path), loaded


@pytest.fixture
def results_store(tmp_path):
    root = tmp_path / "results"
    (root / "aapl").mkdir(parents=True)
    (root / "aapl" / "2024-10-quarterly-results.html").write_text("<h1>Q4 2024</h1>")
    return QuarterlyResultsStore(root)


# ------------------------------------------------------------
# Market data
# ------------------------------------------------------------

class TestMarketData:
    def test_loader_skips_files_without_six_columns(self, market_db):
        _, loaded = market_db
        # the short row is dropped
        assert loaded == {"aapl": 3}

    def test_loader_requires_a_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_market_database(tmp_path / "missing", tmp_path / "x.db")

    def test_range_query(self, market_db):
        database, _ = market_db

        rows = json.loads(database.query_range("aapl", "2024-11-01", "2024-11-30"))

        assert [r["date"] for r in rows] == ["2024-11-01", "2024-11-04"]
        assert rows[0]["close"] == "222.9"

    def test_unknown_ticker_is_reported_as_text(self, market_db):
        database, _ = market_db
        assert database.query_range("msft", "2024-01-01", "2024-12-31") == (
            "empty collection for ticker: msft, cannot continue"
        )

    def test_suspicious_ticker_is_reported_as_text(self, market_db):
        database, _ = market_db
        assert database.query_range('aapl"; --', "a", "b").startswith("invalid ticker")

    def test_missing_database_is_reported_as_text(self, tmp_path):
        database = MarketDatabase(tmp_path / "absent.db")
        assert database.query_range("aapl", "a", "b") == "missing market database, cannot continue"

    def test_command_query(self, market_db):
        database, _ = market_db

        rows = json.loads(database.run_command("SELECT count(*) AS n FROM aapl"))

        assert rows == [{"n": 3}]

    def test_command_cannot_write(self, market_db):
        database, _ = market_db

        assert database.run_command("DROP TABLE aapl").startswith("command error:")
        assert json.loads(database.run_command("SELECT count(*) AS n FROM aapl")) == [{"n": 3}]


# ------------------------------------------------------------
# Quarterly results
# ------------------------------------------------------------

class TestQuarterlyResults:
    def test_reads_release_of_the_quarter(self, results_store):
        assert results_store.get_results("aapl", "2024", "q-4") == "<h1>Q4 2024</h1>"

    @pytest.mark.parametrize(
        "ticker, year, quarter, expected",
        [
            ("msft", "2024", "q-4", "quarterly results for msft are not available."),
            ("../aapl", "2024", "q-4", "quarterly results for ../aapl are not available."),
            ("aapl", "2024", "Q4", "unhandled quarter format: Q4"),
            ("aapl", "../2024", "q-4", "unhandled year format: ../2024"),
            ("aapl", "24", "q-4", "unhandled year format: 24"),
            ("aapl", "2023", "q-4", "quarterly results not found."),
            ("aapl", "2024", "q-1", "quarterly results not found."),
        ],
    )
    def test_domain_failures_are_text(self, results_store, ticker, year, quarter, expected):
        assert results_store.get_results(ticker, year, quarter) == expected


# ------------------------------------------------------------
# Agents
# ------------------------------------------------------------

def test_database_agent_answers_from_the_database(market_db):
    database, _ = market_db
    engine = ScriptedEngine([
        Reply.of(call("queryDatabase", ticker="aapl", startDate="2024-11-01", endDate="2024-11-30")),
        Reply.of("Final Answer: 222.9"),
    ])

    agent = build_database_agent(AgentConfig(), database, engine=engine)

    assert agent.name == "database"
    assert agent.call_agent("apple close on nov 1st 2024") == "Final Answer: 222.9"
    assert engine.requests[0]["system_prompt"] == DATABASE_AGENT_PROMPT
    assert engine.requests[0]["tools"] == ["queryDatabase", "commandQueryDatabase"]

    [result] = engine.requests[1]["content"]
    assert "2024-11-04" in result.output


def test_quarterly_results_agent_tools(results_store):
    engine = ScriptedEngine([
        Reply.of(call("getResults", ticker="aapl", year="2024", quarter="q-4")),
        Reply.of("revenue grew"),
    ])

    agent = build_quarterly_results_agent(AgentConfig(), results_store, engine=engine)

    assert agent.call_agent("aapl q4 2024") == "revenue grew"
    assert engine.requests[1]["content"][0].output == "<h1>Q4 2024</h1>"


def test_combining_agents_hold_only_peer_tools():
    config = AgentConfig(name="combiner")

    combine = build_data_combine_agent(
        config,
        quarterly_results=PeerClient("http://results:1"),
        database=PeerClient("http://database:2"),
        engine=ScriptedEngine(),
    )
    app = build_stock_market_info_agent(
        AgentConfig(),
        data_combine=PeerClient("http://combine:3"),
        engine=ScriptedEngine(),
    )

    assert combine.name == "combiner"
    assert combine.registry.list_tool_names() == ["CallQuarterlyResultsAgent", "callDatabaseAgent"]
    assert app.name == "stock_market_info"
    assert app.registry.list_tool_names() == ["callDataCombineAgent"]
    assert app.registry.get("callDataCombineAgent").required == ["message"]
    assert config.system_prompt is None
