from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP

from .dice import average_from_text, roll_from_text
from .errors import DiceError


logger = logging.getLogger(__name__)

mcp = FastMCP("dice-notation")


@mcp.tool()
def roll_dice(text: str):
    """Roll a dice expression such as '2d6r+2' or '1d20+4*3'.

    Input: text (string); 'r' rerolls ones once, '*N' or '[N]' repeats the roll.
    Output: structured JSON with every die, totals, display lines and an explanation.

    Raises a hard error (exception) on invalid input.
    """

    try:
        return roll_from_text(text)
    except DiceError as e:
        logger.info("Rejected roll request %r: %s", text, e)
        # Fail-fast: surface stable error codes in the message.
        raise ValueError(str(e)) from None


@mcp.tool()
def average_dice(text: str):
    """Expected total of one roll of a dice expression, without rolling."""

    try:
        return average_from_text(text)
    except DiceError as e:
        logger.info("Rejected average request %r: %s", text, e)
        raise ValueError(str(e)) from None


def run() -> None:
    # Default transport is stdio.
    mcp.run()


if __name__ == "__main__":
    run()
