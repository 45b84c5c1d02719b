"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .game import TicTacToeGame

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for one browser's match and the lock serializing it."""

    game: TicTacToeGame = field(default_factory=TicTacToeGame)
    last_seen: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
SESSIONS_LOCK = threading.Lock()
app = FastAPI(
    title="Tic Tac Toe",
    description="Two-player tic-tac-toe with running scores, played in the browser",
)


SESSION_TTL_SECONDS = 60 * 60 * 6  # 6 hours


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    index: int = Field(ge=0, le=8, description="Board cell, row * 3 + col")


def _cleanup_sessions() -> None:
    """Drop sessions that have been idle for longer than the TTL."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if now - session.last_seen >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)
    if expired:
        logger.info("Expired %d idle game session(s)", len(expired))


def _create_session() -> Tuple[str, GameSession]:
    session = GameSession()
    session_id = uuid.uuid4().hex
    with SESSIONS_LOCK:
        _cleanup_sessions()
        SESSIONS[session_id] = session
    logger.info("Created game session %s", session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    with SESSIONS_LOCK:
        try:
            session = SESSIONS[game_id]
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_seen = time.time()
    return session


def _serialize_game(
    game_id: str, game: TicTacToeGame, move_accepted: Optional[bool] = None
) -> Dict[str, object]:
    snapshot = game.snapshot()
    state: Dict[str, object] = {
        "id": game_id,
        "board": [c if c in ("X", "O") else "" for c in snapshot.cells],
        "currentPlayer": snapshot.current_player,
        "status": snapshot.status,
        "winner": snapshot.winner,
        "drawn": snapshot.drawn,
        "roundStarter": snapshot.round_starter,
        "scores": {
            "X": snapshot.scores.x_wins,
            "O": snapshot.scores.o_wins,
            "draws": snapshot.scores.draws,
        },
    }
    if move_accepted is not None:
        state["moveAccepted"] = move_accepted
    return state


@app.post("/api/game")
def create_game() -> Dict[str, object]:
    game_id, session = _create_session()
    with session.lock:
        return _serialize_game(game_id, session.game)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        return _serialize_game(game_id, session.game)


@app.post("/api/game/{game_id}/move")
def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        accepted = session.game.submit_move(request.index)
        return _serialize_game(game_id, session.game, move_accepted=accepted)


@app.post("/api/game/{game_id}/round")
def new_round(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.game.start_new_round()
        return _serialize_game(game_id, session.game)


@app.post("/api/game/{game_id}/match")
def new_match(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.game.start_new_match()
        logger.info("Scores reset for game session %s", game_id)
        return _serialize_game(game_id, session.game)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        --primary: #2563eb;
        --secondary: #f59e0b;
        --error: #ef4444;
        --surface: #ffffff;
        --text: #111827;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        background: linear-gradient(150deg, #2563eb18 0%, #f9fafb 80%);
        color: var(--text);
      }
      main {
        background: var(--surface);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(17, 24, 39, 0.12);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(420px, 100%);
      }
      h1 {
        margin: 0 0 1.25rem;
        text-align: center;
        letter-spacing: 0.04em;
      }
      .scoreboard {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.6rem;
        margin-bottom: 1.25rem;
      }
      .scorebox {
        display: grid;
        justify-items: center;
        padding: 0.5rem;
        border-radius: 12px;
        background: rgba(37, 99, 235, 0.12);
      }
      .scorebox.draws {
        background: var(--secondary);
        color: #fff;
      }
      .scorebox.o {
        background: var(--primary);
        color: #fff;
      }
      .scorelabel {
        font-size: 0.85rem;
        font-weight: 600;
      }
      .scoreval {
        font-size: 1.5rem;
        font-weight: 700;
      }
      #status {
        text-align: center;
        font-size: 1.1rem;
        font-weight: 600;
        min-height: 1.75rem;
        margin-bottom: 1rem;
      }
      #status .status-win:focus {
        outline: 2px dashed var(--primary);
        outline-offset: 4px;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.5rem;
        margin-bottom: 1.25rem;
      }
      .cell {
        aspect-ratio: 1 / 1;
        font-size: 2.2rem;
        font-weight: 700;
        border-radius: 12px;
        border: 2px solid rgba(37, 99, 235, 0.25);
        background: #fff;
        cursor: pointer;
        font-family: inherit;
      }
      .cell:focus-visible {
        outline: 3px solid var(--primary);
      }
      .cell:disabled {
        cursor: default;
      }
      .cell.filled {
        background: #f3f4f6;
      }
      .cell.highlight {
        opacity: 0.75;
      }
      .mark-X {
        color: var(--primary);
      }
      .mark-O {
        color: var(--secondary);
      }
      .controls {
        display: flex;
        gap: 0.75rem;
        justify-content: center;
      }
      .controls button {
        font-size: 1rem;
        padding: 0.55rem 1rem;
        border-radius: 999px;
        border: 1px solid rgba(17, 24, 39, 0.2);
        cursor: pointer;
        font-family: inherit;
      }
      .controls .primary {
        background: var(--primary);
        color: #fff;
      }
      .controls .secondary {
        background: #fff;
      }
      #message {
        text-align: center;
        min-height: 1.25rem;
        color: var(--error);
        font-weight: 600;
        margin-top: 0.75rem;
      }
    </style>
  </head>
  <body>
    <main aria-label=\"Tic Tac Toe Game Board\">
      <h1 tabindex=\"0\">Tic Tac Toe</h1>
      <section class=\"scoreboard\" aria-label=\"Scores\">
        <div class=\"scorebox x\" id=\"score-x\">
          <span class=\"scorelabel\">X Wins</span><span class=\"scoreval\">0</span>
        </div>
        <div class=\"scorebox draws\" id=\"score-draws\">
          <span class=\"scorelabel\">Draws</span><span class=\"scoreval\">0</span>
        </div>
        <div class=\"scorebox o\" id=\"score-o\">
          <span class=\"scorelabel\">O Wins</span><span class=\"scoreval\">0</span>
        </div>
      </section>
      <div id=\"status\" aria-live=\"polite\"></div>
      <section class=\"board\" id=\"board\" role=\"grid\" aria-label=\"Tic Tac Toe Board\"></section>
      <section class=\"controls\">
        <button class=\"primary\" id=\"reset-board\" type=\"button\" aria-label=\"Reset Board\">
          Reset Board
        </button>
        <button class=\"secondary\" id=\"new-game\" type=\"button\" aria-label=\"New Game (Reset Scores)\">
          New Game
        </button>
      </section>
      <div id=\"message\" role=\"status\"></div>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      let gameId = null;
      let state = null;

      async function callApi(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        if (!response.ok) {
          const payload = await response.json().catch(() => ({}));
          throw new Error(payload.detail || `Request failed (${response.status})`);
        }
        return response.json();
      }

      async function run(action) {
        messageEl.textContent = '';
        try {
          return await action();
        } catch (err) {
          messageEl.textContent = err.message;
          return null;
        }
      }

      function setScore(id, value, label) {
        const box = document.getElementById(id);
        box.querySelector('.scoreval').textContent = value;
        box.setAttribute('aria-label', `${label}: ${value}`);
      }

      function renderStatus() {
        statusEl.innerHTML = '';
        const span = document.createElement('span');
        if (state.status === 'won') {
          span.className = 'status-win';
          span.setAttribute('role', 'alert');
          span.setAttribute('aria-live', 'assertive');
          span.tabIndex = -1;
          span.innerHTML = `Winner: <span class=\"mark-${state.winner}\">${state.winner}</span>`;
        } else if (state.status === 'draw') {
          span.className = 'status-draw';
          span.setAttribute('role', 'alert');
          span.setAttribute('aria-live', 'assertive');
          span.textContent = "It's a Draw!";
        } else {
          span.innerHTML = `Next Turn: <span class=\"mark-${state.currentPlayer}\">${state.currentPlayer}</span>`;
        }
        statusEl.appendChild(span);
      }

      function renderBoard() {
        const playing = state.status === 'playing';
        boardEl.innerHTML = '';
        state.board.forEach((cell, idx) => {
          const button = document.createElement('button');
          button.type = 'button';
          button.className = 'cell';
          if (cell) button.classList.add('filled');
          if (!playing) button.classList.add('highlight');
          button.dataset.idx = idx;
          button.setAttribute('role', 'gridcell');
          const disabled = Boolean(cell) || !playing;
          button.disabled = disabled;
          button.setAttribute('aria-disabled', String(disabled));
          button.tabIndex = disabled ? -1 : 0;
          button.setAttribute(
            'aria-label',
            cell
              ? `Cell ${idx + 1} occupied by ${cell}`
              : `Empty cell ${idx + 1}, ${state.currentPlayer}'s move`
          );
          if (cell) {
            const mark = document.createElement('span');
            mark.className = `mark-${cell}`;
            mark.textContent = cell;
            button.appendChild(mark);
          }
          button.addEventListener('click', () => sendMove(idx));
          button.addEventListener('keydown', (event) => handleCellKeyDown(event, idx));
          boardEl.appendChild(button);
        });
      }

      function render(previousStatus) {
        setScore('score-x', state.scores.X, 'X Wins');
        setScore('score-draws', state.scores.draws, 'Draws');
        setScore('score-o', state.scores.O, 'O Wins');
        renderStatus();
        renderBoard();
        if (previousStatus === 'playing' && state.status === 'won') {
          window.setTimeout(() => {
            const announcement = statusEl.querySelector('.status-win');
            if (announcement) announcement.focus();
          }, 125);
        }
      }

      function applyState(next) {
        const previousStatus = state ? state.status : null;
        state = next;
        render(previousStatus);
      }

      function focusFirstCell() {
        window.setTimeout(() => {
          const first = boardEl.querySelector('.cell[tabindex=\"0\"]');
          if (first) first.focus();
        }, 80);
      }

      function handleCellKeyDown(event, idx) {
        if (state.status !== 'playing') return;
        const row = Math.floor(idx / 3);
        const col = idx % 3;
        if (event.key === 'Enter' || event.key === ' ') {
          event.preventDefault();
          sendMove(idx);
          return;
        }
        let next = idx;
        if (event.key === 'ArrowRight') next = col < 2 ? idx + 1 : idx - 2;
        else if (event.key === 'ArrowLeft') next = col > 0 ? idx - 1 : idx + 2;
        else if (event.key === 'ArrowDown') next = row < 2 ? idx + 3 : idx - 6;
        else if (event.key === 'ArrowUp') next = row > 0 ? idx - 3 : idx + 6;
        else return;
        event.preventDefault();
        const target = boardEl.querySelector(`.cell[data-idx=\"${next}\"]`);
        if (target) target.focus();
      }

      async function sendMove(index) {
        if (!gameId || state.status !== 'playing' || state.board[index]) return;
        const next = await run(() =>
          callApi(`/api/game/${gameId}/move`, {
            method: 'POST',
            body: JSON.stringify({ index }),
          })
        );
        if (next) applyState(next);
      }

      async function resetBoard() {
        const next = await run(() => callApi(`/api/game/${gameId}/round`, { method: 'POST' }));
        if (next) {
          applyState(next);
          focusFirstCell();
        }
      }

      async function newGame() {
        const next = await run(() => callApi(`/api/game/${gameId}/match`, { method: 'POST' }));
        if (next) {
          applyState(next);
          focusFirstCell();
        }
      }

      async function startSession() {
        const next = await run(() => callApi('/api/game', { method: 'POST' }));
        if (next) {
          gameId = next.id;
          applyState(next);
        }
      }

      document.getElementById('reset-board').addEventListener('click', resetBoard);
      document.getElementById('new-game').addEventListener('click', newGame);
      startSession();
    </script>
  </body>
</html>
"""
