import logging
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ..tools.dispatcher import ToolHandler
from ..tools.registry import ToolRegistry
from ..tools.schema import ParameterSpec, ToolDescriptor

logger = logging.getLogger(__name__)

# month numbers of each quarter (01 is Jan)
QUARTER_MONTHS = {
    "q-1": ("01", "02", "03"),
    "q-2": ("04", "05", "06"),
    "q-3": ("07", "08", "09"),
    "q-4": ("10", "11", "12"),
}

_YEAR = re.compile(r"[0-9]{4}")

GET_RESULTS_TOOL = ToolDescriptor(
    name="getResults",
    description="get the ticker's quarterly results.",
    parameters={
        "ticker": ParameterSpec(
            type="string",
            description="The ticker code of the company in lowercase",
        ),
        "year": ParameterSpec(
            type="string",
            description="The year for the results in the format yyyy",
        ),
        "quarter": ParameterSpec(
            type="string",
            description="The quarter number in the format q-n where n is the quarter number",
        ),
    },
)


class QuarterlyResultsStore:
    """
    Directory of quarterly results releases.

    Layout: ``<root>/<ticker>/<yyyy>-<mm>-quarterly-results.html``, where
    ``mm`` is one of the three months of the quarter.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def get_results(self, ticker: str, year: str, quarter: str) -> str:
        logger.info("[QUARTERLY RESULTS] getResults for %s for %s - %s", ticker, quarter, year)

        ticker_dir = self.root / ticker
        if Path(ticker).name != ticker or not ticker_dir.is_dir():
            return f"quarterly results for {ticker} are not available."

        if not _YEAR.fullmatch(year):
            return f"unhandled year format: {year}"

        months = QUARTER_MONTHS.get(quarter)
        if months is None:
            return f"unhandled quarter format: {quarter}"

        for month in months:
            candidate = ticker_dir / f"{year}-{month}-quarterly-results.html"
            if not candidate.is_file():
                continue
            try:
                return candidate.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("[QUARTERLY RESULTS] Failed to read %s: %s", candidate, e)
                return "failed to retrieve quarterly results."

        return "quarterly results not found."


def register_quarterly_results_tools(
    registry: ToolRegistry,
    store: QuarterlyResultsStore,
) -> Dict[str, ToolHandler]:

    def get_results(args: Mapping[str, Any]) -> str:
        return store.get_results(args["ticker"], args["year"], args["quarter"])

    registry.register(GET_RESULTS_TOOL)

    return {GET_RESULTS_TOOL.name: get_results}
