import logging
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from game_delegate import RecordingDelegate, TileEvent
from game_model import GameModel
from settings import EngineSettings

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API over the 2048 engine. "\
                "Manage your game state (board, score, win_tile) on the client side.",
    version="2.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

_defaults = EngineSettings()

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: int = Field(
        default=_defaults.size,
        gt=1, # Board size must be at least 2x2
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )
    win_tile: int = Field(
        default=_defaults.win_tile,
        gt=0,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists (0 = empty).")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (IN_PROGRESS, GAME_WON, GAME_OVER)."
    )
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")


class TileEventData(BaseModel):
    """One board mutation, in the order the engine performed it."""
    kind: str = Field(..., description="'move', 'merge' (two tiles into one) or 'insert'.")
    destination: Tuple[int, int] = Field(..., description="(row, col) the tile ends up at.")
    value: int = Field(..., gt=0, description="Value of the tile at the destination.")
    source: Optional[Tuple[int, int]] = Field(default=None, description="(row, col) the tile came from.")
    second_source: Optional[Tuple[int, int]] = Field(default=None, description="Second merged tile, for 'merge'.")

    @classmethod
    def from_event(cls, event: TileEvent) -> "TileEventData":
        return cls(
            kind=event.kind,
            destination=event.destination,
            value=event.value,
            source=event.source,
            second_source=event.second_source,
        )


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state before the move.")
    score: int = Field(..., ge=0, description="Current score before the move.")
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (UP, DOWN, LEFT, RIGHT)."
    )
    win_tile: int = Field(..., gt=0, description="The win condition tile for this game instance.")
    # board_size is implicitly derived from the board structure.

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )
    events: List[TileEventData] = Field(
        default_factory=list,
        description="Tile moves, merges and insertions performed by this request, in order."
    )

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game based on the provided settings (size and win_tile).

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4). Default is 4.
    - **win_tile**: Tile value to reach to win (e.g., 2048). Default is 2048.

    Returns the initial game state, including the board with two starting tiles,
    score (0), progress status (IN_PROGRESS), and the specified win_tile.
    """
    try:
        model = GameModel(settings.size, settings.win_tile)
        model.new_game()

        return GameStateData(
            board=model.board.to_rows(),
            score=model.score,
            progress=model.progress(),
            win_tile=settings.win_tile,
            board_size=model.dimension
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except core.EngineFault as e:
        logger.critical(f"Engine fault in /game/new: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal engine error during game creation.")
    except Exception as e:
        logger.error(f"Unexpected error in /game/new: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board` state, `score`, the `direction` of the move,
    and the `win_tile` for this game instance.

    The API will:
    1. Slide and merge every line of the board in the chosen direction.
    2. If the move changed the board and the game is not won, add a new random tile (2 or 4).
    3. Determine the new game status (IN_PROGRESS, GAME_WON, GAME_OVER).

    Returns the updated game state, whether the move was effective, the tile
    events to animate and an optional message.
    """
    recorder = RecordingDelegate()
    try:
        model = GameModel.from_rows(
            request_data.board, request_data.win_tile, score=request_data.score, delegate=recorder
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    message_for_client: Optional[str] = None

    try:
        move_was_effective = model.perform_move(request_data.direction)

        if move_was_effective:
            current_progress = model.follow_up()
        else:
            message_for_client = "Move was not effective; board state unchanged by slide."
            current_progress = model.progress()

        if current_progress == core.GameProgressState.GAME_WON:
            message_for_client = "Congratulations! You won!"
        elif current_progress == core.GameProgressState.GAME_OVER:
            message_for_client = "Game Over. No more valid moves."

        return MoveResponseData(
            board=model.board.to_rows(),
            score=model.score,
            progress=current_progress,
            win_tile=request_data.win_tile,
            board_size=model.dimension,
            move_was_effective=move_was_effective,
            message=message_for_client,
            events=[TileEventData.from_event(e) for e in recorder.events]
        )
    except core.EngineFault as e:
        logger.critical(f"Engine fault in /game/move: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal engine error while processing the move.")
    except Exception as e:
        logger.error(f"Unexpected error in /game/move: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")
