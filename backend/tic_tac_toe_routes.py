from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel
from fastapi.responses import JSONResponse
from services.tic_tac_toe_service import (
    EVENT_ROUND_CONCLUDED,
    EVENT_SCORE_CHANGED,
    TicTacToeGame,
)
from services.tic_tac_toe_board import AI_SYMBOL, HUMAN_SYMBOL
from collections import OrderedDict
import logging
import os

# Set up logging
logger = logging.getLogger(__name__)

def read_ai_delay():
    """Seconds to pause before the AI answers, from TIC_TAC_TOE_AI_DELAY_MS"""
    return float(os.getenv("TIC_TAC_TOE_AI_DELAY_MS", "800")) / 1000

# Pause before the AI answers (the browser shows "AI is thinking..." meanwhile)
AI_MOVE_DELAY = read_ai_delay()

# Least recently used sessions are dropped past this many
MAX_SESSIONS = int(os.getenv("TIC_TAC_TOE_MAX_SESSIONS", "1000"))

# Create a router for Tic-Tac-Toe game endpoints
tic_tac_toe_router = APIRouter(prefix="/tic-tac-toe", tags=["tic-tac-toe"])

# Store game instances by session, least recently used first
game_instances = OrderedDict()

def get_session_game(session_id):
    """
    Get or create a game instance for a browser session

    Args:
        session_id: The X-Session-Id header value

    Returns:
        TicTacToeGame: The session's game instance
    """
    if session_id in game_instances:
        game_instances.move_to_end(session_id)
        return game_instances[session_id]

    while game_instances and len(game_instances) >= MAX_SESSIONS:
        expired_id, expired_game = game_instances.popitem(last=False)
        expired_game.close()
        logger.info(f"🗑️ TIC-TAC-TOE SESSION EXPIRED - {expired_id}")

    game_instances[session_id] = TicTacToeGame(ai_delay=AI_MOVE_DELAY)
    logger.info(f"🆕 TIC-TAC-TOE SESSION CREATED - {session_id}")
    return game_instances[session_id]

def require_session(session_id, action):
    if not session_id:
        logger.info(f"❌ TIC-TAC-TOE {action} UNAUTHORIZED - Missing session id")
        raise HTTPException(status_code=401, detail="Missing X-Session-Id header.")
    return get_session_game(session_id)

def toast_for(event):
    """
    Toast notification shown by the browser for an event, or None

    Args:
        event: GameEvent raised by the game

    Returns:
        dict: title, description and variant of the toast
    """
    if event.kind == EVENT_ROUND_CONCLUDED:
        winner = event.payload["outcome"]["winner"]
        if winner == HUMAN_SYMBOL:
            return {"title": "Congratulations!", "description": "You won this round!", "variant": "default"}
        if winner == AI_SYMBOL:
            return {"title": "AI Wins", "description": "Better luck next time!", "variant": "destructive"}
        return {"title": "It's a Draw!", "description": "Neither player won this round.", "variant": "default"}
    if event.kind == EVENT_SCORE_CHANGED and event.payload.get("reset"):
        return {"title": "Scores Reset", "description": "All scores have been reset to 0.", "variant": "default"}
    return None

class EventCollector:
    """Collects the game's events raised while handling one request"""

    def __init__(self, game):
        self.game = game
        self.events = []

    def __enter__(self):
        self.game.subscribe(self.events.append)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.game.unsubscribe(self.events.append)
        return False

    def serialize(self):
        return [
            {"kind": event.kind, "payload": event.payload, "toast": toast_for(event)}
            for event in self.events
        ]

def build_response(game, collector, **extra):
    content = game.serialize_game_state()
    content["events"] = collector.serialize()
    content.update(extra)
    return JSONResponse(content=content)

class MoveRequest(BaseModel):
    index: int

@tic_tac_toe_router.get("/state")
async def get_state(x_session_id: str = Header(None)):
    """Return the current board, turn state and score"""
    game = require_session(x_session_id, "STATE")
    return JSONResponse(content=game.serialize_game_state())

@tic_tac_toe_router.post("/new-round")
async def new_round(x_session_id: str = Header(None)):
    """Start a new round and return the initial state, keeping the score"""
    game = require_session(x_session_id, "NEW ROUND")
    with EventCollector(game) as collector:
        game.start_new_round()

    logger.info(f"🎮 TIC-TAC-TOE NEW ROUND - {x_session_id}")
    return build_response(game, collector)

@tic_tac_toe_router.post("/reset-session")
async def reset_session(x_session_id: str = Header(None)):
    """Start a new round and reset the score to 0 - 0"""
    game = require_session(x_session_id, "RESET")
    with EventCollector(game) as collector:
        game.reset_session()

    logger.info(f"🎮 TIC-TAC-TOE SESSION RESET - {x_session_id}")
    return build_response(game, collector)

@tic_tac_toe_router.post("/move")
async def make_move(move_data: MoveRequest, x_session_id: str = Header(None)):
    """Process a player's move"""
    game = require_session(x_session_id, "MOVE")
    with EventCollector(game) as collector:
        accepted = game.apply_human_move(move_data.index)

    if accepted:
        logger.info(f"🎮 TIC-TAC-TOE PLAYER MOVE - {x_session_id} | Position: {move_data.index}")
    else:
        logger.info(f"⚠️ TIC-TAC-TOE MOVE IGNORED - {x_session_id} | Position: {move_data.index}")
    return build_response(game, collector, accepted=accepted)

@tic_tac_toe_router.post("/ai-move")
async def ai_move(x_session_id: str = Header(None)):
    """Make AI's move after the presentation delay and return the updated game state"""
    game = require_session(x_session_id, "AI MOVE")

    # Only this move's events: a reset arriving during the delay answers for itself
    collector = EventCollector(game)
    try:
        move_position = await game.request_computer_move(listener=collector.events.append)
    except ValueError as e:
        logger.warning(f"⚠️ TIC-TAC-TOE INVALID AI MOVE - {x_session_id} | Error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"🤖 TIC-TAC-TOE AI MOVE - {x_session_id} | Position: {move_position}")
    return build_response(game, collector, accepted=move_position is not None, move=move_position)
