"""Run progress shared between the solver loop and the ``/progress`` endpoint.

The record lives in ``PROGRESS`` under ``PROGRESS_LOCK`` and is mirrored to
a JSON state file after every change, so a second worker process serving
``/progress`` sees the same run.  Milestones also go to a dedicated file
logger (``logs/packer_runs.log``).
"""
from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

_LOG_DIR = Path(__file__).resolve().parent / "logs"

PROGRESS_LOCK = threading.Lock()

STATE_FILE = Path(os.environ.get("PROGRESS_STATE_FILE") or _LOG_DIR / "progress_state.json")
STATE_FILE_TMP = STATE_FILE.with_name(STATE_FILE.name + ".tmp")
_LAST_STATE_MTIME: float = 0.0


def _run_logger() -> logging.Logger:
    logger = logging.getLogger("packer.run_log")
    if logger.handlers:
        return logger
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(_LOG_DIR / "packer_runs.log", encoding="utf-8")
    except OSError:
        # unwritable log dir: run without the file log
        return logger
    fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S"))
    logger.addHandler(fh)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


RUN_LOGGER = _run_logger()


def _log_event(event: str, **fields: Any) -> None:
    if not RUN_LOGGER.handlers:
        return
    parts = " ".join(f"{k}={v}" for k, v in fields.items() if v not in (None, ""))
    if parts:
        RUN_LOGGER.info("%s | %s", event, parts)
    else:
        RUN_LOGGER.info("%s", event)


def _secs(seconds: Optional[float]) -> Optional[str]:
    return None if seconds is None else f"{float(seconds):.2f}s"


_IDLE: Dict[str, Any] = {
    "status": "Idle",          # Idle | Solving | Solved | Error
    "regions_total": 0,
    "regions_done": 0,
    "regions_fit": 0,
    "current": "",             # e.g. "region 3 (12x5)"
    "percent": 0.0,            # 0..100
    "elapsed_start": None,     # wall-clock t0 of the run
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
}

PROGRESS: Dict[str, Any] = dict(_IDLE, run_id=0)


# ------------------------------
# State file
# ------------------------------

def _save_locked() -> None:
    global _LAST_STATE_MTIME
    try:
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        STATE_FILE_TMP.write_text(json.dumps(PROGRESS, ensure_ascii=False), encoding="utf-8")
        os.replace(STATE_FILE_TMP, STATE_FILE)
        _LAST_STATE_MTIME = STATE_FILE.stat().st_mtime
    except OSError:
        # a read-only state dir only costs cross-process visibility
        pass


def _refresh_locked(force: bool = False) -> None:
    """Pull in a newer state file written by another process."""
    global _LAST_STATE_MTIME
    try:
        mtime = STATE_FILE.stat().st_mtime
        if not force and mtime <= _LAST_STATE_MTIME:
            return
        data = json.loads(STATE_FILE.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return
    if isinstance(data, dict):
        PROGRESS.update({k: data[k] for k in PROGRESS if k in data})
        _LAST_STATE_MTIME = mtime


def _tick_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = time.time() - float(t0)


def _update(**fields: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS.update(fields)
        _save_locked()


# ------------------------------
# Run lifecycle
# ------------------------------

def reset() -> None:
    with PROGRESS_LOCK:
        run_id = int(PROGRESS.get("run_id") or 0) + 1
        PROGRESS.clear()
        PROGRESS.update(_IDLE, run_id=run_id)
        _log_event("Progress reset", run_id=run_id)
        _save_locked()


def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = time.time()
        PROGRESS["elapsed"] = 0.0
        _log_event("Run timer started", run_id=PROGRESS["run_id"])
        _save_locked()


def set_status(v: Any) -> None:
    _update(status=str(v))


def set_message(msg: Any) -> None:
    _update(message="" if msg is None else str(msg))


def set_total(n: Any) -> None:
    try:
        total = max(0, int(n))
    except (TypeError, ValueError):
        total = 0
    with PROGRESS_LOCK:
        done = int(PROGRESS.get("regions_done") or 0)
        PROGRESS["regions_total"] = total
        PROGRESS["percent"] = (100.0 * done / total) if total else 0.0
        _save_locked()


def set_current(label: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["current"] = "" if label is None else str(label)
        _tick_locked()
        _save_locked()


def record_region(region_id: int, fits: Optional[bool], *, reason: str = "", elapsed: Optional[float] = None) -> None:
    """Count one finished region; ``fits=None`` (undecided) is done but not fit."""
    with PROGRESS_LOCK:
        done = int(PROGRESS.get("regions_done") or 0) + 1
        total = int(PROGRESS.get("regions_total") or 0)
        PROGRESS["regions_done"] = done
        if fits:
            PROGRESS["regions_fit"] = int(PROGRESS.get("regions_fit") or 0) + 1
        PROGRESS["percent"] = (100.0 * done / total) if total else 0.0
        _tick_locked()
        _log_event("Region finished", region=region_id, fits=fits, reason=reason, duration=_secs(elapsed))
        _save_locked()


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``Solved``/``Error``) when given; otherwise
    an idle status becomes ``Solved``.  ``reason`` lands in ``message``.
    """
    with PROGRESS_LOCK:
        _tick_locked()
        if ok is not None:
            PROGRESS["status"] = "Solved" if ok else "Error"
            PROGRESS["ok"] = bool(ok)
        elif PROGRESS.get("status") in ("", "Idle", "Solving", None):
            PROGRESS["status"] = "Solved"
            PROGRESS["ok"] = True
        PROGRESS["percent"] = 100.0
        PROGRESS["done"] = True
        if reason is not None:
            PROGRESS["message"] = str(reason)
        _log_event(
            "Run finished",
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            regions=PROGRESS["regions_done"],
            fit=PROGRESS["regions_fit"],
            duration=_secs(PROGRESS["elapsed"]),
            message=PROGRESS["message"],
        )
        _save_locked()


# ------------------------------
# Snapshots for the UI
# ------------------------------

def _fmt_elapsed(seconds: float) -> str:
    m, s = divmod(int(max(0.0, float(seconds))), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    return f"{m}m {s}s" if h == 0 else f"{h}h {m}m"


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _refresh_locked()
        _tick_locked()
        out = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    out["elapsed_str"] = _fmt_elapsed(out["elapsed"])
    return out


def as_json() -> Dict[str, Any]:
    # Alias used by /progress
    return snapshot()


with PROGRESS_LOCK:
    _refresh_locked(force=True)
