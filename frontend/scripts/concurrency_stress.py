from __future__ import annotations

import argparse
import concurrent.futures
import json
import random
import subprocess
import sys
import threading
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


REPO_ROOT = Path(__file__).resolve().parents[2]
SERVER_PATH = REPO_ROOT / "frontend" / "server.py"

PIECES_PER_GAME = 28
PHASES = {"awaiting_selection", "piece_selected", "awaiting_rescue_choice", "game_over"}


def _request_json(url: str, payload: Optional[Dict[str, Any]] = None, timeout: float = 2.0) -> Tuple[int, Dict[str, Any]]:
    body = None if payload is None else json.dumps(payload, separators=(",", ":")).encode("utf-8")
    req = urllib.request.Request(url, data=body, method="GET" if body is None else "POST")
    req.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.status
            raw = resp.read()
    except urllib.error.HTTPError as e:
        status = int(e.code)
        raw = e.read()
    data = json.loads(raw.decode("utf-8")) if raw else {}
    return status, data


def _wait_ready(base_url: str, deadline_s: float = 10.0) -> None:
    end = time.monotonic() + deadline_s
    while time.monotonic() < end:
        try:
            status, data = _request_json(f"{base_url}/api/state")
            if status == 200 and data.get("ok") is True:
                return
        except OSError:
            pass
        time.sleep(0.05)
    raise RuntimeError("server did not become ready")


def _click_worker(base_url: str, rounds: int, seed: int, errors: List[str], lock: threading.Lock) -> None:
    rnd = random.Random(seed)
    for _ in range(rounds):
        try:
            status, data = _request_json(f"{base_url}/api/state")
            if status != 200:
                continue
            state = data["state"]
            pending = state.get("pending_rescue")
            if pending is not None:
                target = rnd.choice(pending["targets"])
                click = {"row": target["r"], "col": target["c"]}
            elif state.get("legal_moves"):
                target = rnd.choice(state["legal_moves"])
                click = {"row": target["r"], "col": target["c"]}
            else:
                own = [p for p in state["pieces"] if p["player"] == state["current_player"] and not p["is_trapped"]]
                if not own:
                    continue
                p = rnd.choice(own)
                click = {"row": p["row"], "col": p["col"]}
            status, body = _request_json(f"{base_url}/api/click", click)
            if status not in (200, 409):
                with lock:
                    errors.append(f"click failure status={status} body={body}")
        except OSError as e:
            with lock:
                errors.append(f"click exception: {e}")


def _reset_worker(base_url: str, rounds: int, errors: List[str], lock: threading.Lock) -> None:
    for _ in range(rounds):
        try:
            status, data = _request_json(f"{base_url}/api/reset", {})
            if status != 200:
                with lock:
                    errors.append(f"reset failure status={status} body={data}")
        except OSError as e:
            with lock:
                errors.append(f"reset exception: {e}")
        time.sleep(0.01)


def _state_probe_worker(base_url: str, rounds: int, errors: List[str], lock: threading.Lock) -> None:
    for _ in range(rounds):
        try:
            status, data = _request_json(f"{base_url}/api/state")
            if status != 200 or data.get("ok") is not True:
                continue
            state = data["state"]
            pieces = state["pieces"]
            problems = []
            if len(pieces) != PIECES_PER_GAME:
                problems.append(f"piece count {len(pieces)}")
            emperors = sorted(p["player"] for p in pieces if p["type"] == "emperor")
            if emperors != [1, 2]:
                problems.append(f"emperors {emperors}")
            if any(p["is_trapped"] and p["playable"] for p in pieces):
                problems.append("trapped piece inside the interior")
            if state["phase"] not in PHASES:
                problems.append(f"phase {state['phase']!r}")
            if problems:
                with lock:
                    errors.append("inconsistent state: " + ", ".join(problems))
        except OSError as e:
            with lock:
                errors.append(f"state exception: {e}")


def run_stress(base_url: str, click_workers: int, reset_workers: int, rounds: int, seed: int) -> None:
    errors: List[str] = []
    lock = threading.Lock()
    with concurrent.futures.ThreadPoolExecutor(max_workers=click_workers + reset_workers + 1) as ex:
        futures = []
        for i in range(click_workers):
            futures.append(ex.submit(_click_worker, base_url, rounds, seed + i, errors, lock))
        for _ in range(reset_workers):
            futures.append(ex.submit(_reset_worker, base_url, rounds // 4, errors, lock))
        futures.append(ex.submit(_state_probe_worker, base_url, rounds * 2, errors, lock))
        for f in futures:
            f.result()
    if errors:
        raise AssertionError(errors[0])


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8765)
    ap.add_argument("--seed", type=int, default=1337)
    ap.add_argument("--rounds", type=int, default=120)
    ap.add_argument("--click-workers", type=int, default=4)
    ap.add_argument("--reset-workers", type=int, default=1)
    args = ap.parse_args()

    cmd = [sys.executable, str(SERVER_PATH), "--host", args.host, "--port", str(args.port)]
    proc = subprocess.Popen(cmd, cwd=str(REPO_ROOT), stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    base_url = f"http://{args.host}:{args.port}"
    try:
        _wait_ready(base_url)
        run_stress(base_url, args.click_workers, args.reset_workers, args.rounds, args.seed)
        print("ok")
        return 0
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=3)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait(timeout=3)


if __name__ == "__main__":
    raise SystemExit(main())
