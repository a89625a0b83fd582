# cli_driver.py
# This file is intended to be run to play the 2048 engine on the CLI.
# Moves go through the command queue, paced by the asyncio event loop.

import asyncio
import logging
import os
from typing import List

from core import DIRECTION, GameProgressState
from game_model import GameModel
from settings import load_settings

logger = logging.getLogger(__name__)

DIRECTION_MAP = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}


async def play(model: GameModel) -> GameProgressState:
    """Runs the input loop until the game ends or the player quits."""
    loop = asyncio.get_running_loop()
    model.new_game()
    current_progress = model.progress()
    display_board_state(model.board.to_rows(), model.score, current_progress)

    def on_complete(changed: bool) -> None:
        nonlocal current_progress
        if changed:
            current_progress = model.follow_up()
            display_board_state(model.board.to_rows(), model.score, current_progress)
        else:
            print("Move did not change the board. Try a different direction.")

    while current_progress == GameProgressState.IN_PROGRESS:
        move_input = (await loop.run_in_executor(
            None, input, "Enter move (W/A/S/D for Up/Left/Down/Right, Q to quit): "
        )).strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        chosen_direction = DIRECTION_MAP.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D.")
            continue

        model.queue_move(chosen_direction, on_complete)
        # Let a pending settle timer fire before reading the next key.
        while model.queue.timer_pending and len(model.queue):
            await asyncio.sleep(model.queue.delay)

    return current_progress


def main():
    logging.basicConfig(level=os.environ.get("GAME2048_LOG_LEVEL", "WARNING").upper())
    settings = load_settings()
    model = GameModel.from_settings(settings)

    final_progress = asyncio.run(play(model))

    print("\n--- Final Board State ---")
    display_board_state(model.board.to_rows(), model.score, final_progress)
    if final_progress == GameProgressState.GAME_WON:
        print(f"Congratulations! You reached the {settings.win_tile} tile!")
    elif final_progress == GameProgressState.GAME_OVER:
        print("No more moves possible. Better luck next time!")


# --- Display Function ---
def display_board_state(board: List[List[int]], score: int, progress: GameProgressState):
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {score}")
    status_message = {
        GameProgressState.IN_PROGRESS: f"Status: {progress.name}",
        GameProgressState.GAME_WON: "YOU WON!",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message.get(progress, f"Status: {progress.name} (Unknown)"))

    for row in board:
        print("\t".join(map(str, row)))
    print("-" * (len(board) * 6)) # Adjust width based on board size


if __name__ == "__main__":
    main()
